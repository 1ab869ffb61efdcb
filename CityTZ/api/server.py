"""
API server module for the CityTZ package.

This module provides a Flask-based API server for querying city and timezone
data through RESTful API endpoints.
"""

import time
from typing import Dict, Any, List, Optional, Tuple, Callable
from functools import wraps

from flask import Flask, request, Response, g, current_app
import werkzeug.exceptions

from CityTZ.data import CityData
from CityTZ.data.validation import validate_query
from CityTZ.services.city_service import CityService
from CityTZ.utils.logging import get_logger, get_request_id
from CityTZ.exceptions import CityTZError, InvalidParameterError

# Get a logger for this module
logger = get_logger(__name__)

TRUE_VALUES = ('1', 'true', 'yes', 'on')

def format_response(data: Any = None, message: str = None,
                   error: str = None, status_code: int = 200,
                   meta: Dict[str, Any] = None,
                   error_code: str = None) -> Tuple[Dict[str, Any], int]:
    """
    Format API response in a standardized structure.

    Args:
        data: Response data payload
        message: Optional success message
        error: Optional error message
        status_code: HTTP status code
        meta: Optional metadata dictionary
        error_code: Optional error code identifier

    Returns:
        Tuple of (response_dict, status_code)
    """
    response = {
        'success': 200 <= status_code < 300,
        'status_code': status_code,
    }

    if data is not None:
        response['data'] = data

    if message:
        response['message'] = message

    if error:
        response['error'] = error

    if error_code:
        response['error_code'] = error_code

    if meta:
        response['meta'] = meta

    return response, status_code

def api_response(f: Callable) -> Callable:
    """
    Decorator to standardize API responses.

    Return values are wrapped in the response envelope. CityTZ errors and HTTP
    exceptions propagate to the application's error handlers; anything else
    is logged and reported as a 500.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        try:
            result = f(*args, **kwargs)
        except (CityTZError, werkzeug.exceptions.HTTPException):
            raise
        except Exception as e:
            logger.exception(f"Unhandled exception in {f.__name__}: {str(e)}")
            return format_response(
                error="Internal Server Error",
                message="An unexpected error occurred",
                status_code=500
            )

        if isinstance(result, tuple) and len(result) == 2:
            data, status_code = result
            return format_response(data=data, status_code=status_code)
        return format_response(data=result)

    return decorated_function

def create_app(city_data: Optional[CityData] = None, debug: bool = False,
               data_file: Optional[str] = None) -> Flask:
    """
    Create and configure a Flask application instance.

    Args:
        city_data: CityData to serve. If None, one is built from configuration.
        debug: Enable debug mode with additional error information
        data_file: Dataset path used when building CityData

    Returns:
        A configured Flask application
    """
    app = Flask(__name__)

    app.config.update(
        DEBUG=debug
    )

    start_time = time.time()
    city_service = CityService(city_data=city_data, data_file=data_file)
    app.config['CITY_SERVICE_INSTANCE'] = city_service

    # Load eagerly so that a broken dataset shows up in /health
    info = city_service.city_data.get_dataset_info()
    app.config['INITIALIZED'] = info['loaded']
    if info['loaded']:
        logger.info(
            f"Serving {info['record_count']} cities from {info['source']} "
            f"(initialized in {time.time() - start_time:.2f}s)"
        )
    else:
        logger.error(f"City data unavailable: {info.get('error')}")

    # Configure JSON responses
    app.json.sort_keys = False
    app.json.ensure_ascii = False

    @app.before_request
    def before_request() -> None:
        """Set up request context with timing information."""
        g.start_time = time.time()
        g.request_id = request.headers.get('X-Request-ID') or get_request_id()

    @app.after_request
    def after_request(response: Response) -> Response:
        """Log request information and add timing headers."""
        if hasattr(g, 'start_time'):
            duration_ms = (time.time() - g.start_time) * 1000
            response.headers['X-Request-Duration-Ms'] = str(int(duration_ms))
            response.headers['X-Request-ID'] = g.request_id

            logger.info(
                f"Request: {request.method} {request.path} | "
                f"Status: {response.status_code} | "
                f"Duration: {duration_ms:.2f}ms"
            )

        return response

    @app.errorhandler(werkzeug.exceptions.HTTPException)
    def handle_http_error(error: werkzeug.exceptions.HTTPException) -> Tuple[Dict[str, Any], int]:
        """Handle HTTP errors (not found, method not allowed, ...)."""
        return format_response(
            error=error.name,
            message=str(error.description),
            status_code=error.code,
            meta={'debug_info': str(error)} if debug else None
        )

    @app.errorhandler(CityTZError)
    def handle_citytz_error(error: CityTZError) -> Tuple[Dict[str, Any], int]:
        """Handle CityTZ-specific exceptions."""
        if error.status_code >= 500:
            logger.error(f"CityTZ Error: {error.error_code} - {error.message}")
        else:
            logger.warning(f"CityTZ Error: {error.error_code} - {error.message}")

        error.context['debug'] = debug
        error_dict = error.to_dict()

        return format_response(
            error=error.__class__.__name__,
            message=error.user_message,
            status_code=error.status_code,
            error_code=error.error_code,
            meta=error_dict.get('technical_details') if debug else None
        )

    @app.errorhandler(Exception)
    def handle_exception(error: Exception) -> Tuple[Dict[str, Any], int]:
        """Handle generic exceptions."""
        logger.exception(f"Unhandled server exception: {error}")

        system_error = CityTZError(
            message=f"Unhandled exception: {error}",
            user_message="An unexpected error occurred.",
            error_code="TZ-SYS-4999",
            status_code=500,
            cause=error
        )
        return handle_citytz_error(system_error)

    register_routes(app)

    return app

def get_city_service() -> CityService:
    """
    Get the CityService instance for the current application.
    """
    return current_app.config['CITY_SERVICE_INSTANCE']

def get_client_key() -> str:
    """Identity used for rate limiting: the client's address."""
    return request.remote_addr or 'unknown'

def validate_params(required_params: Optional[List[str]] = None,
                    integer_params: Optional[List[str]] = None):
    """
    Decorator for validating request parameters.

    ``limit`` is always checked: it must be an integer no greater than the
    configured maximum (0 or less means "no limit").

    Args:
        required_params: List of required parameter names
        integer_params: List of parameters that must be integers

    Returns:
        A decorated function
    """
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            params = {}
            if request.args:
                params.update(request.args.to_dict())
            params.update(kwargs)

            errors = []

            if required_params:
                for param in required_params:
                    if param not in params or not params[param]:
                        errors.append(f"Missing required parameter: {param}")

            for param in ['limit'] + list(integer_params or []):
                if param in params and params[param]:
                    try:
                        int(params[param])
                    except ValueError:
                        errors.append(f"Parameter must be an integer: {param}")

            if not errors and params.get('limit'):
                max_limit = get_city_service().config.get_search_limits()['max']
                if int(params['limit']) > max_limit:
                    errors.append(f"Limit exceeds maximum of {max_limit}")

            if errors:
                raise InvalidParameterError(
                    message=f"Validation errors: {', '.join(errors)}",
                    user_message=f"Invalid parameters: {', '.join(errors)}",
                    context={'errors': errors}
                )

            return f(*args, **kwargs)

        return decorated_function

    return decorator

def get_filter_args() -> Dict[str, Any]:
    """Common query parameters: timezone, country and limit."""
    limit = request.args.get('limit')
    return {
        'timezone': request.args.get('timezone') or None,
        'country': request.args.get('country') or None,
        'limit': int(limit) if limit else None,
    }

def results_payload(results, **fields) -> Dict[str, Any]:
    """Build the data payload for a list of CityRecord results."""
    payload = dict(fields)
    filters = {key: request.args[key] for key in ('timezone', 'country') if request.args.get(key)}
    if filters:
        payload['filters'] = filters
    payload['count'] = len(results)
    payload['results'] = [record.to_dict() for record in results]
    return payload

def register_routes(app: Flask) -> None:
    """
    Register API routes with the Flask application.

    Args:
        app: Flask application instance
    """
    @app.route('/health', methods=['GET'])
    @api_response
    def health() -> Dict[str, Any]:
        """
        Health check endpoint.

        Returns basic status information about the API service.
        """
        return {
            'status': 'ok',
            'service': 'CityTZ API',
            'initialized': app.config.get('INITIALIZED', False),
            'timestamp': time.time()
        }

    @app.route('/api/status', methods=['GET'])
    @api_response
    def status() -> Dict[str, Any]:
        """API status with dataset, cache and admission information."""
        return get_city_service().get_status()

    @app.route('/api/cities/lookup', methods=['GET'])
    @validate_params(required_params=['city'])
    @api_response
    def lookup() -> Dict[str, Any]:
        """
        Look up cities by exact name (case-insensitive).

        Query parameters:
            city: City name
            limit, timezone, country: Optional result limit and filters
        """
        city = request.args.get('city', '')
        results = get_city_service().lookup_city(
            city, client_key=get_client_key(), **get_filter_args()
        )
        return results_payload(results, city=city)

    @app.route('/api/cities/search', methods=['GET'])
    @validate_params(required_params=['q'])
    @api_response
    def search() -> Dict[str, Any]:
        """
        Find cities matching every term of ``q`` across city, state, province
        and country.

        Query parameters:
            q: Search text
            limit, timezone, country: Optional result limit and filters
        """
        query = request.args.get('q', '')
        results = get_city_service().find_cities(
            query, client_key=get_client_key(), **get_filter_args()
        )
        return results_payload(results, query=query)

    @app.route('/api/cities/iso/<code>', methods=['GET'])
    @validate_params()
    @api_response
    def by_iso(code: str) -> Dict[str, Any]:
        """
        Find cities by ISO2 or ISO3 country code.

        Parameters:
            code: Two- or three-letter country code
        """
        results = get_city_service().find_by_iso(
            code, client_key=get_client_key(), **get_filter_args()
        )
        return results_payload(results, code=code.strip().upper())

    @app.route('/api/cities/match', methods=['GET'])
    @validate_params(required_params=['q'])
    @api_response
    def match() -> Dict[str, Any]:
        """
        Generic matcher over name, ASCII name, state, province, country and
        ISO codes.

        Query parameters:
            q: Query text
            case_sensitive: Compare without folding case (default: false)
            exact: Require full-field equality (default: false)
            limit, timezone, country: Optional result limit and filters
        """
        # The matcher itself does no validation; untrusted input is checked here
        max_length = get_city_service().config.get_validation_limits()['max_query_length']
        query = validate_query(request.args.get('q', ''), max_length)
        case_sensitive = request.args.get('case_sensitive', '').lower() in TRUE_VALUES
        exact = request.args.get('exact', '').lower() in TRUE_VALUES

        results = get_city_service().search_cities(
            query,
            case_sensitive=case_sensitive,
            exact_match=exact,
            client_key=get_client_key(),
            **get_filter_args()
        )
        return results_payload(results, query=query, case_sensitive=case_sensitive, exact=exact)

    @app.route('/api/cities', methods=['GET'])
    @validate_params()
    @api_response
    def all_cities() -> Dict[str, Any]:
        """
        List cities in dataset order.

        Query parameters:
            limit, timezone, country: Optional result limit and filters
        """
        results = get_city_service().all_cities(client_key=get_client_key(), **get_filter_args())
        return results_payload(results)

def start_server(host: str = '0.0.0.0', port: int = 5000,
                 data_file: Optional[str] = None, debug: bool = False) -> None:
    """
    Start the API server.

    Args:
        host: Host address to bind to
        port: Port to listen on
        data_file: Path to cityMap.json
        debug: Whether to run in debug mode
    """
    app = create_app(data_file=data_file, debug=debug)

    if not app.config.get('INITIALIZED', False):
        raise RuntimeError("Could not start server: city data failed to load")

    logger.info(f"Starting CityTZ API server on {host}:{port} (debug: {debug})")
    app.run(host=host, port=port, debug=debug)
