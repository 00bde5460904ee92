from casegraph.services.review.review_queue import ReviewQueueEmitter

__all__ = ["ReviewQueueEmitter"]
