"""Run Jokeish with uvicorn: python -m jokeish"""

import uvicorn

if __name__ == "__main__":
    uvicorn.run("jokeish.main:app", host="0.0.0.0", port=3000)
