from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class PagingOptions(BaseSettings):
    """
    Configuration for pagination sessions.

    Values come from keyword arguments first, then from MONGOPAGE_*
    environment variables (MONGOPAGE_SECRET, MONGOPAGE_PAGE_SIZE, ...),
    then from the defaults below. A missing or empty secret selects plain
    (unsigned) cursor tokens.

    Raises:
        pydantic.ValidationError: If a size or limit is out of range
    """

    secret: str | None = Field(default=None, description="Cursor signing secret")
    algorithm: str = Field(default="HS256", description="JWS algorithm for signed cursors")
    default_limit: int = Field(
        default=0,
        ge=0,
        description="Limit used when a request sets none (0 means unlimited)",
    )
    page_size: int = Field(default=10, ge=1, description="Page-number pagination page size")
    page_margin: int = Field(
        default=3,
        ge=1,
        description="Page links shown on either side of the current page",
    )

    model_config = SettingsConfigDict(
        env_prefix="MONGOPAGE_",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("secret", mode="before")
    @classmethod
    def _empty_secret_is_none(cls, value: str | None) -> str | None:
        return value or None

    @property
    def signed(self) -> bool:
        """Returns True if cursor tokens are authenticated."""
        return bool(self.secret)

    @classmethod
    def from_env(cls, prefix: str = "MONGOPAGE_") -> "PagingOptions":
        """
        Build options from environment variables with a custom prefix.

        Args:
            prefix: Environment variable prefix

        Returns:
            PagingOptions populated from {prefix}SECRET, {prefix}PAGE_SIZE, ...
        """
        return cls(_env_prefix=prefix)
