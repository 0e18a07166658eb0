# main.py
"""
Run the API server from the project root:
    python main.py
or
    uvicorn stockforum.main:app --reload
"""
import uvicorn

from stockforum.main import app

if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=8000)
