"""Component Factory for strategy instantiation.

The Factory Pattern allows the application to instantiate
different strategy implementations at runtime based on
configuration or environment variables.
"""

import logging

from docforge.core.config import Settings, get_settings
from docforge.interfaces.backend import BaseContentBackend
from docforge.interfaces.diagram import BaseDiagramEngine
from docforge.interfaces.publisher import BaseContentFiller, BasePublisher
from docforge.interfaces.template import BaseSectionInjector, BaseTemplateAnalyzer
from docforge.strategies.backends import ConfluenceClient, GenerationApiFiller
from docforge.strategies.publishing import BatchPublisher
from docforge.strategies.renderers import DiagramRenderer, KrokiEngine, MermaidCliEngine
from docforge.strategies.template_engine import PlaceholderAnalyzer, SectionInjector

logger = logging.getLogger(__name__)


class ComponentFactory:
    """Factory for creating component instances based on configuration.

    This factory implements the Factory Pattern, allowing strategy
    selection at runtime without modifying core application code.

    Example:
        ```python
        settings = get_settings()
        factory = ComponentFactory(settings)

        analyzer = factory.get_template_analyzer()
        renderer = factory.get_renderer()
        publisher = factory.get_publisher()
        ```
    """

    def __init__(self, settings: Settings | None = None) -> None:
        """Initialize the factory with optional settings.

        Args:
            settings: Application settings. If None, uses global settings.
        """
        self._settings = settings or get_settings()
        self._template_analyzer_cache: BaseTemplateAnalyzer | None = None
        self._section_injector_cache: BaseSectionInjector | None = None
        self._diagram_engine_cache: BaseDiagramEngine | None = None
        self._renderer_cache: DiagramRenderer | None = None
        self._backend_cache: BaseContentBackend | None = None
        self._publisher_cache: BasePublisher | None = None
        self._filler_cache: BaseContentFiller | None = None

    @property
    def settings(self) -> Settings:
        return self._settings

    def get_template_analyzer(self) -> BaseTemplateAnalyzer:
        if self._template_analyzer_cache is None:
            logger.info("Instantiating template analyzer")
            self._template_analyzer_cache = PlaceholderAnalyzer()

        return self._template_analyzer_cache

    def get_section_injector(self) -> BaseSectionInjector:
        if self._section_injector_cache is None:
            logger.info("Instantiating section injector")
            self._section_injector_cache = SectionInjector()

        return self._section_injector_cache

    def get_diagram_engine(self, engine_type: str | None = None) -> BaseDiagramEngine:
        """Get a diagram engine instance based on the specified type.

        Args:
            engine_type: The engine type to instantiate. If None, uses settings.

        Returns:
            A BaseDiagramEngine implementation instance.

        Raises:
            ValueError: If the engine type is unknown.
        """
        if self._diagram_engine_cache is None or engine_type is not None:
            engine_type = engine_type or self._settings.diagram_engine

            logger.info(f"Instantiating diagram engine: {engine_type}")

            match engine_type:
                case "kroki":
                    self._diagram_engine_cache = KrokiEngine(
                        base_url=self._settings.kroki_url,
                        timeout=self._settings.request_timeout,
                    )
                case "mmdc":
                    self._diagram_engine_cache = MermaidCliEngine(
                        mmdc_path=self._settings.mmdc_path,
                        timeout=self._settings.request_timeout,
                    )
                case _:
                    raise ValueError(
                        f"Unknown diagram engine: {engine_type}. "
                        f"Valid options: 'kroki', 'mmdc'"
                    )

        return self._diagram_engine_cache

    def get_renderer(self) -> DiagramRenderer:
        if self._renderer_cache is None:
            logger.info("Instantiating diagram renderer")
            self._renderer_cache = DiagramRenderer(
                engine=self.get_diagram_engine(),
                default_width=self._settings.raster_default_width,
                default_height=self._settings.raster_default_height,
            )

        return self._renderer_cache

    def get_backend(self) -> BaseContentBackend:
        """Get the Confluence backend.

        Raises:
            ValueError: If no Confluence URL is configured.
        """
        if self._backend_cache is None:
            if not self._settings.confluence_base_url:
                raise ValueError("CONFLUENCE_BASE_URL is required for the content backend")

            logger.info("Instantiating Confluence backend")
            self._backend_cache = ConfluenceClient(
                base_url=self._settings.confluence_base_url,
                username=self._settings.confluence_username,
                api_token=self._settings.confluence_api_token,
                content_path=self._settings.content_path,
                diagram_publish_path=self._settings.diagram_publish_path,
                timeout=self._settings.request_timeout,
                append_title_timestamp=self._settings.append_title_timestamp,
            )

        return self._backend_cache

    def get_publisher(self) -> BasePublisher:
        if self._publisher_cache is None:
            logger.info("Instantiating diagram publisher")
            self._publisher_cache = BatchPublisher(
                backend=self.get_backend(),
                renderer=self.get_renderer(),
                upload_delay=self._settings.upload_delay_seconds,
            )

        return self._publisher_cache

    def get_content_filler(self) -> BaseContentFiller:
        if self._filler_cache is None:
            logger.info("Instantiating content filler")
            self._filler_cache = GenerationApiFiller(
                base_url=self._settings.generation_api_url,
                poll_interval=self._settings.generation_poll_interval,
                max_attempts=self._settings.generation_max_attempts,
                timeout=max(self._settings.request_timeout, 60.0),
            )

        return self._filler_cache

    def clear_cache(self) -> None:
        """Clear all cached component instances.

        This forces new instances to be created on next access.
        Useful for testing or when settings change.
        """
        self._template_analyzer_cache = None
        self._section_injector_cache = None
        self._diagram_engine_cache = None
        self._renderer_cache = None
        self._backend_cache = None
        self._publisher_cache = None
        self._filler_cache = None
        logger.debug("Component factory cache cleared")


# Global factory instance
_factory: ComponentFactory | None = None


def get_factory() -> ComponentFactory:
    """Get or create the global ComponentFactory instance.

    Returns:
        The singleton ComponentFactory instance.
    """
    global _factory
    if _factory is None:
        _factory = ComponentFactory()
    return _factory
