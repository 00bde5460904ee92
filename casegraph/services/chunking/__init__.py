from casegraph.services.chunking.section_segmenter import SectionSegmenter

__all__ = ["SectionSegmenter"]
