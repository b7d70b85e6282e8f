"""
Compilation and route contexts.

A ``CompilationContext`` lives for one generation pass and carries the
collaborators every route needs. A ``RouteContext`` carries the state
of the route currently being turned into an operation.
"""

from dataclasses import dataclass, field
from typing import Any, List, Optional, Tuple

from ..config import SpecConfig
from ..controller.metadata import RouteDescriptor
from ..diagnostics import Diagnostics
from ..faults import Fault
from ..model import ApiSpecDocument, ContentMap, OperationDocument
from .docstrings import DocumentationParser, ParsedDocumentation
from .fragments import FragmentConverter
from .paths import BoundPath
from .placeholders import PlaceholderResolver
from .schema import SchemaResolver


@dataclass(eq=False)
class CompilationContext:
    """
    Collaborators of one compilation pass.

    Contexts compare by identity and key the document registry.
    """
    config: SpecConfig = field(default_factory=SpecConfig)
    diagnostics: Diagnostics = field(default_factory=Diagnostics)
    schema_resolver: SchemaResolver = field(default_factory=SchemaResolver)
    documentation_parser: DocumentationParser = field(default_factory=DocumentationParser)
    placeholders: Optional[PlaceholderResolver] = None
    ignored_types: Optional[Tuple[type, ...]] = None

    def __post_init__(self):
        if self.placeholders is None:
            self.placeholders = PlaceholderResolver(
                properties=self.config.properties,
                env_file=self.config.env_file,
            )
        if self.ignored_types is None:
            self.ignored_types = self.config.resolve_ignored_types()

    def is_ignored(self, tp: Any) -> bool:
        """Parameters of these types are never documented."""
        return isinstance(tp, type) and issubclass(tp, self.ignored_types)


@dataclass
class RouteContext:
    """State of the route being built."""
    compilation: CompilationContext
    route: RouteDescriptor
    document: ApiSpecDocument
    operation: OperationDocument
    path: BoundPath
    docs: ParsedDocumentation
    converter: FragmentConverter

    @property
    def consumes(self) -> List[str]:
        return list(self.route.consumes) or [self.compilation.config.default_media_type]

    @property
    def produces(self) -> List[str]:
        return list(self.route.produces) or [self.compilation.config.default_media_type]

    @property
    def http_method(self) -> str:
        return self.route.http_method.upper()

    def warn(self, message: str, fault: Optional[Fault] = None, location: Optional[str] = None) -> None:
        self.compilation.diagnostics.warn(message, location or self.route.location, fault=fault)

    def resolve_schema(self, element: Any, tp: Any, media_type: str):
        return self.compilation.schema_resolver.resolve_schema(self.document, element, tp, media_type)

    def build_content(self, element: Any, tp: Any, media_types: List[str]) -> ContentMap:
        return self.compilation.schema_resolver.build_content(self.document, element, tp, media_types)
