"""Failures of the analysis and chat workflows. `message` is shown to the user as is."""


class AnalysisError(Exception):
    default_message = "Failed to process report"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class InvalidRequest(AnalysisError):
    default_message = "Missing required parameters"


class MissingCredential(AnalysisError):
    default_message = (
        "API key not configured. Please add OPENAI_API_KEY or OPENROUTER_API_KEY to your .env file"
    )


class ContentNotFound(AnalysisError):
    default_message = "File not found in storage"


class UnsupportedFormat(AnalysisError):
    default_message = "Unsupported file type for analysis"


PDF_NOT_SUPPORTED = "PDF analysis not yet supported. Please upload an image (JPG, PNG, GIF, BMP, TIFF)."


class UpstreamError(AnalysisError):
    def __init__(self, status_code: int, body: str = ""):
        self.status_code = status_code
        self.body = body
        super().__init__(f"API error: {status_code} - {body}")


class EmptyResponse(AnalysisError):
    default_message = "API returned no content"
