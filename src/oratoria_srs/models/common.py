from enum import Enum


class OutputModality(str, Enum):
    """How the learner produced the answer.

    flashcard は重み付けの上では typed と同等に扱う。
    """

    spoken = "spoken"
    typed = "typed"
    flashcard = "flashcard"


class Outcome(str, Enum):
    success = "success"
    partial = "partial"
    fail = "fail"
