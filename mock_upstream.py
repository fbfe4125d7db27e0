import random
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List

import uvicorn
from fastapi import FastAPI, Query

app = FastAPI()

NAMES = ["Whiskers", "Biscuit", "Nimbus", "Pickles", "Saffron", "Mochi", "Tigerlily", "Pepper"]
TRAITS = ["naps in sunbeams", "hunts socks", "guards the fridge", "sings at dawn", "collects bottle caps"]


def make_cat() -> Dict[str, Any]:
    name = random.choice(NAMES)
    cat_id = str(uuid.uuid4())
    return {
        "uuid": cat_id,
        "name": name,
        "description": f"{name} {random.choice(TRAITS)}.",
        "image": f"https://placecats.invalid/{cat_id}.png",
        "date_created": datetime.now(timezone.utc).isoformat(),
    }


@app.get("/cats/random")
async def random_cat() -> Dict[str, Any]:
    return make_cat()


@app.get("/cats")
async def cats(n: int = Query(5, ge=1, le=100)) -> List[Dict[str, Any]]:
    return [make_cat() for _ in range(n)]


if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=8082)
