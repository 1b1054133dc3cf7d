"""Application settings loaded from environment and .env files."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Global configuration for the PostSync composer.

    Values are loaded in order: field defaults → .env file → environment
    variables. Environment variables are prefixed with ``PSY_``.

    Attributes:
        supported_formats: Allowed upload image extensions (lowercase,
            without dot).
        supported_mime_types: Allowed upload MIME types.
        max_upload_mb: Maximum upload file size in megabytes.
        zoom_step: Zoom change applied by one zoom-in/out action.
        default_quality: Initial JPEG export quality.
        prompt_min_chars: Minimum prompt length accepted by the generation
            form.
        prompt_max_chars: Maximum prompt length accepted by the generation
            form.
        function_prompt_min_chars: Minimum prompt length accepted by the
            generation server function.
        generate_endpoint: URL of the deployed generation function. When
            empty the composer calls the function handler in-process.
        functions_api_key: Bearer/apikey credential sent to the function.
        hf_model_url: Hugging Face Inference API model endpoint.
        hf_token: Optional Hugging Face API token.
        http_timeout: Timeout in seconds for outbound HTTP calls.
        oauth_redirect_base: Origin used to build OAuth redirect URIs.
        oauth_client_ids: Client id per platform name.
        invite_default_origin: Origin used in invitation links when the
            request carries no ``Origin`` header.
        log_level: Level for the ``postsync`` logger.
    """

    model_config = SettingsConfigDict(
        env_prefix="PSY_",
        env_file=".env",
        env_file_encoding="utf-8",
    )

    # --- Upload ---
    supported_formats: list[str] = ["jpg", "jpeg", "png", "webp"]
    supported_mime_types: list[str] = ["image/jpeg", "image/png", "image/webp"]
    max_upload_mb: float = 10.0

    # --- Editor ---
    zoom_step: float = 0.1

    # --- Export ---
    default_quality: int = 90

    # --- Image generation ---
    prompt_min_chars: int = 50
    prompt_max_chars: int = 500
    function_prompt_min_chars: int = 10
    generate_endpoint: str = ""
    functions_api_key: str = ""
    hf_model_url: str = (
        "https://api-inference.huggingface.co/models/"
        "stabilityai/stable-diffusion-xl-base-1.0"
    )
    hf_token: str = ""
    http_timeout: float = 60.0

    # --- OAuth ---
    oauth_redirect_base: str = "http://localhost:8501"
    oauth_client_ids: dict[str, str] = {}

    # --- Team ---
    invite_default_origin: str = "http://localhost:8501"

    # --- Logging ---
    log_level: str = "INFO"

    @property
    def max_upload_bytes(self) -> int:
        """Upload size limit in bytes."""
        return int(self.max_upload_mb * 1024 * 1024)
