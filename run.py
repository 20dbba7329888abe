#!/usr/bin/env python3
"""
Glass Gateway Entry Point

Run the application with:
    python run.py

Or with uvicorn directly:
    uvicorn glass_gateway.main:app --reload --port 8000
"""
import uvicorn

from glass_gateway.config import get_settings


def main():
    """Run the Glass Gateway server"""
    settings = get_settings()
    print("=" * 50)
    print("  Glass Gateway - Master Auto Glass integration")
    print("=" * 50)
    print(f"  Server:    http://{settings.HOST}:{settings.PORT}")
    print(f"  Vendor:    {settings.MAG_API_URL}")
    print(f"  Transport: {settings.MAG_TRANSPORT_MODE}")
    print(f"  Env:       {settings.ENV}")
    print("=" * 50)
    print()

    uvicorn.run(
        "glass_gateway.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG
    )


if __name__ == "__main__":
    main()
