from __future__ import annotations


class WordCounterError(Exception):
    kind = "processing_failure"
    status_code = 500

    def __init__(self, message: str, cause: BaseException | None = None) -> None:
        self.message = message
        self.cause = cause
        super().__init__(self.detail)

    @property
    def detail(self) -> str:
        if self.cause is None:
            return self.message
        return f"{self.message} with error: {self.cause}"

    def to_dict(self) -> dict[str, str]:
        return {"kind": self.kind, "detail": self.detail}


class InvalidRequest(WordCounterError):
    kind = "invalid_request"
    status_code = 400


class UploadFailure(WordCounterError):
    kind = "upload_failure"
    status_code = 400


class FetchFailure(WordCounterError):
    kind = "fetch_failure"
    status_code = 422

    def __init__(self, url: str, cause: BaseException | None = None) -> None:
        self.url = url
        super().__init__(f"Failed to retrieve file from URL: [ {url} ]", cause)


class EmptyTextFailure(WordCounterError):
    kind = "empty_text"
    status_code = 422


class ProcessingFailure(WordCounterError):
    kind = "processing_failure"
    status_code = 500
