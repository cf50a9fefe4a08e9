"""Derives every configured format for a source image."""

from __future__ import annotations

import logging

from imgopt_shared.config import OptimizerConfig
from imgopt_shared.formats import FormatRegistry, FormatSpec
from imgopt_shared.models import ConversionRequest, DerivedImages

from .cache import DerivationCache
from .codecs import default_registry

logger = logging.getLogger(__name__)


class ImageOptimizer:
    """
    Runs the derivation cache once per registered format.

    Formats are independent: one failing never blocks the others. The
    result lists whatever succeeded, most modern format first.
    """

    def __init__(
        self,
        config: OptimizerConfig | None = None,
        registry: FormatRegistry | None = None,
        cache: DerivationCache | None = None,
    ):
        if config is None:
            config = OptimizerConfig.load()

        self._config = config
        self._registry = registry if registry is not None else default_registry()
        self._cache = cache if cache is not None else DerivationCache(config)

    @property
    def config(self) -> OptimizerConfig:
        return self._config

    @property
    def formats(self) -> list[FormatSpec]:
        return list(self._registry)

    def process(self, request: ConversionRequest) -> DerivedImages:
        """Resolve every format for the request."""
        result = DerivedImages(src=request.src)

        for fmt in self._registry:
            try:
                path = self._cache.resolve(
                    request.src,
                    fmt,
                    recreate=request.recreate,
                    disable=request.disable,
                )
            except Exception:
                logger.exception("Unexpected error deriving %s for %s", fmt.name, request.src)
                continue

            if path is not None:
                result.add(fmt.name, path, fmt.mime_type)

        logger.debug("Derived %d format(s) for %s: %s", len(result), request.src, list(result))
        return result

    def produce_derivatives(
        self,
        src: str,
        disable: bool = False,
        recreate: bool = False,
    ) -> DerivedImages:
        return self.process(ConversionRequest(src=src, disable=disable, recreate=recreate))
