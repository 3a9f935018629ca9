"""
Main entry point for the FastAPI application.

Usage:
    python run_fastapi.py

Or with uvicorn directly:
    uvicorn intellitutor.fastapi_app:create_fastapi_app --factory --host 0.0.0.0 --port 5001 --reload
"""

import uvicorn

from intellitutor.config.settings import Config

if __name__ == "__main__":
    debug = Config.DEBUG or Config.APP_ENV == "development"

    print(f"Starting IntelliTutor API in {Config.APP_ENV} mode...")
    print(f"Server running on http://{Config.HOST}:{Config.PORT}")
    print(f"API docs available at http://{Config.HOST}:{Config.PORT}/docs")

    uvicorn.run(
        "intellitutor.fastapi_app:create_fastapi_app",
        factory=True,
        host=Config.HOST,
        port=Config.PORT,
        reload=debug,
        log_level="info" if debug else "warning",
    )
