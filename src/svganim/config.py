"""Preview cache configuration.

Settings can be given to the constructor or through environment variables.
Constructor parameters take precedence over environment variables.
"""

import logging
import os
import tempfile
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)

DEFAULT_DIRECTORY_NAME = "icon-manager-previews"
DEFAULT_SIZE = 16
DEFAULT_DIGEST_LENGTH = 8


def _default_directory() -> str:
    return os.path.join(tempfile.gettempdir(), DEFAULT_DIRECTORY_NAME)


@dataclass
class PreviewConfig:
    """Settings of the preview cache.

    Environment variables:
        SVGANIM_PREVIEW_DIR: Directory holding preview files
            (default: <system temp dir>/icon-manager-previews)
        SVGANIM_PREVIEW_SIZE: Width and height given to previews that have
            none (default: 16)
        SVGANIM_DIGEST_LENGTH: Number of hex digits of the content digest
            in preview file names (default: 8)

    Example:
        >>> config = PreviewConfig.default()
        >>> config = PreviewConfig(directory="/tmp/previews", size=24)
    """

    directory: str = field(default_factory=_default_directory)
    size: int = DEFAULT_SIZE
    digest_length: int = DEFAULT_DIGEST_LENGTH

    @classmethod
    def default(cls) -> "PreviewConfig":
        """Create PreviewConfig from environment variables.

        Raises:
            ValueError: If an environment variable holds an invalid value.
        """

        def parse_env_int(key: str, default: int) -> int:
            value_str = os.environ.get(key)
            if value_str is None:
                return default

            try:
                value = int(value_str)
            except ValueError as e:
                raise ValueError(
                    f"Environment variable {key}={value_str!r} is not a valid integer"
                ) from e

            if value <= 0:
                logger.warning(
                    f"Environment variable {key}={value} is not positive, "
                    f"using default {default}"
                )
                return default

            return value

        return cls(
            directory=os.environ.get("SVGANIM_PREVIEW_DIR") or _default_directory(),
            size=parse_env_int("SVGANIM_PREVIEW_SIZE", DEFAULT_SIZE),
            digest_length=parse_env_int("SVGANIM_DIGEST_LENGTH", DEFAULT_DIGEST_LENGTH),
        )
