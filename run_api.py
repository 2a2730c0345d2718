"""Run FastAPI server."""
import uvicorn

from kinship.api.main import app

if __name__ == "__main__":
    print("Starting FastAPI on http://localhost:8000")
    uvicorn.run(app, host="0.0.0.0", port=8000)
