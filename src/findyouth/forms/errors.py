"""Errors raised by multi-step form submissions."""


class SubmissionError(Exception):
    """A submission step failed; later steps were not attempted.

    Earlier steps are not rolled back.
    """

    def __init__(self, step: str, message: str):
        super().__init__(f"{step}: {message}")
        self.step = step
        self.message = message
