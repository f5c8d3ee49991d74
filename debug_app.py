# debug_app.py
import uvicorn

from turnos.config import get_settings

if __name__ == "__main__":
    settings = get_settings()
    uvicorn.run(
        "turnos.main:app",
        host="127.0.0.1",
        port=8000,
        reload=False,  # single process so breakpoints hit
        log_level=settings.LOG_LEVEL.lower(),
    )
