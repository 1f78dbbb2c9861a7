from fastapi import FastAPI
from prometheus_fastapi_instrumentator import Instrumentator
from orderflow.version import VERSION
from orderflow.core.config import settings
from orderflow.core.logging import configure_logging, get_logger
from orderflow.api.errors import register_exception_handlers
from orderflow.api.middleware import request_logging_middleware
from orderflow.api.v1 import routes_orders, routes_products, routes_users

configure_logging()
logger = get_logger(__name__)

# Create instrumentator first
instrumentator = Instrumentator()

app = FastAPI(title='Order Service', version=VERSION)

# Instrument the app BEFORE adding routes or middleware
instrumentator.instrument(app).expose(
    app,
    include_in_schema=False,
    endpoint='/metrics',
    should_gzip=True,
)

app.middleware('http')(request_logging_middleware)
register_exception_handlers(app)

@app.get('/health')
def health(): return {'status': 'ok', 'service': 'orders'}

@app.get('/v1/_info')
def info(): return {'service': 'orders', 'version': VERSION, 'environment': settings.ENVIRONMENT}

@app.on_event('startup')
async def startup_event():
    for route in app.routes:
        if hasattr(route, 'methods') and hasattr(route, 'path'):
            logger.debug('route registered', methods=sorted(route.methods), path=route.path)

app.include_router(routes_users.router, prefix='/api/v1/users', tags=['users'])
app.include_router(routes_products.router, prefix='/api/v1/products', tags=['products'])
app.include_router(routes_orders.router, prefix='/api/v1/orders', tags=['orders'])
