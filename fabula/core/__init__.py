"""Engine core: content model, condition/effect evaluation and the verbs."""
