from .candidate_search import CandidateSearchSource

__all__ = [
    "CandidateSearchSource",
]
