#!/usr/bin/env python3
"""
GeoSnap production startup script
"""

import os
import uvicorn

def start_production_server():
    """Start uvicorn with production settings"""
    port = int(os.getenv("PORT", "8000"))
    print(f"Starting GeoSnap API on port {port} (docs at /docs)")
    uvicorn.run(
        "app.main:app",
        host="0.0.0.0",  # Bind to all interfaces
        port=port,
        reload=False,
        workers=int(os.getenv("WEB_CONCURRENCY", "2")),
        log_level="info",
        access_log=True,
    )

if __name__ == "__main__":
    start_production_server()
