# Package exports
from openapi_router.config import Settings, get_settings
from openapi_router.logging import (
    configure_logging,
    get_logger,
    bind_context,
    clear_context,
    generate_correlation_id,
    api_logger,
    registry_logger,
    cli_logger,
)
from openapi_router.errors import (
    AppError,
    AppErrorException,
    ErrorCode,
    RegistryStateError,
    SchemaDefinitionError,
)
from openapi_router.validation import (
    SchemaKind,
    SchemaType,
    Num,
    Int,
    Str,
    DateTime,
    DateOnly,
    Email,
    Uuid,
    Bool,
    Enumeration,
    Arr,
    Custom,
    Query,
    Path,
    FieldError,
    ValidationError,
    to_schema_type,
)
from openapi_router.routing import (
    ApiResponse,
    RouteSchema,
    OpenAPIRoute,
    OpenAPIRouter,
    RouteRegistry,
    DocumentGenerator,
    DocumentOverride,
    to_openapi_path,
)
from openapi_router.app import create_app

__version__ = "0.1.0"
