# Development server for the KV store using the in-memory storage backend
from kvstore_lib.config.config import Config
from kvstore_lib.logging_config import configure_logging
from kvstore_lib.main import create_app

configure_logging('DEBUG')
app = create_app(Config(storage_backend='memory'))
if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000, log_config=None)
