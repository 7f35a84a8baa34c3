"""Image proxy — generation, edit and variation through LiteLLM.

Each call is a single round trip with fixed defaults (``n=1``; edits and
variations at 1024x1024). Vendor failures surface as VendorError /
NetworkError; nothing is retried.
"""

from __future__ import annotations

import litellm

from chatrelay.config import ImageCfg
from chatrelay.errors import ValidationError
from chatrelay.logging_config import get_logger
from chatrelay.proxies.base import FilePart, response_json
from chatrelay.rag.llm_client import translate_error, validate_api_key

logger = get_logger(__name__)

EDIT_OPERATION = "edit"
VARIATION_OPERATION = "variation"
_EDIT_SIZE = "1024x1024"


class ImageProxy:
    """Forward image requests to the vendor.

    Args:
        config:      Image defaults (models, size, quality, style).
        api_key_env: Environment variable holding the vendor key.
    """

    def __init__(self, config: ImageCfg | None = None, api_key_env: str = "OPENAI_API_KEY") -> None:
        self._config = config or ImageCfg()
        self._api_key_env = api_key_env

    def generate(
        self,
        prompt: str | None,
        size: str | None = None,
        quality: str | None = None,
        style: str | None = None,
    ) -> dict:
        """Generate one image for *prompt* with the fixed generation model."""
        if not prompt:
            raise ValidationError("Missing prompt")
        api_key = validate_api_key(self._api_key_env)

        logger.info("Image generation: model=%s size=%s", self._config.generation_model, size)
        try:
            response = litellm.image_generation(
                prompt=prompt,
                model=self._config.generation_model,
                n=1,
                size=size or self._config.size,
                quality=quality or self._config.quality,
                style=style or self._config.style,
                api_key=api_key,
            )
        except Exception as exc:
            raise translate_error(exc, "Image generation") from exc
        return response_json(response)

    def edit(
        self,
        image: FilePart | None,
        operation: str | None,
        prompt: str | None = None,
        mask: FilePart | None = None,
    ) -> dict:
        """Edit *image* with *prompt* (``operation="edit"``) or create a variation.

        Any operation other than ``edit`` produces a variation.
        """
        if image is None:
            raise ValidationError("Missing image file")
        api_key = validate_api_key(self._api_key_env)

        if operation == EDIT_OPERATION:
            if not prompt:
                raise ValidationError("Missing prompt for image edit")
            logger.info("Image edit: %s (mask=%s)", image[0], "yes" if mask else "no")
            kwargs = {"mask": mask} if mask is not None else {}
            try:
                response = litellm.image_edit(
                    image=image,
                    prompt=prompt,
                    model=self._config.edit_model,
                    n=1,
                    size=_EDIT_SIZE,
                    api_key=api_key,
                    **kwargs,
                )
            except Exception as exc:
                raise translate_error(exc, "Image edit") from exc
            return response_json(response)

        logger.info("Image variation: %s", image[0])
        try:
            response = litellm.image_variation(
                image=image,
                model=self._config.edit_model,
                n=1,
                size=_EDIT_SIZE,
                api_key=api_key,
            )
        except Exception as exc:
            raise translate_error(exc, "Image variation") from exc
        return response_json(response)
