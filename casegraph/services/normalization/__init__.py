from casegraph.services.normalization.text_normalizer import normalize_text

__all__ = ["normalize_text"]
