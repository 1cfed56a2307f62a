import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field
from pymongo.database import Database
from pymongo.errors import PyMongoError

import config
from auth import UserStore
from database import connect, db, disconnect, get_db
from errors import ValidationFailed
from graphql_api import graphql_app
from schemas import Role

logging.basicConfig(level=config.LOG_LEVEL)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # unique names rely on the indexes, refuse to serve without them
    if not connect(db):
        raise RuntimeError("MongoDB unreachable, indexes not ensured")
    yield
    disconnect(db)


# App and CORS
app = FastAPI(title="Restaurant API", lifespan=lifespan)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(graphql_app, prefix="/graphql")


class BootstrapRequest(BaseModel):
    username: str = Field(..., min_length=3)
    password: str = Field(..., min_length=1)


# Bootstrap route: the first owner cannot be created through createUser
@app.post("/init/bootstrap")
def bootstrap_owner(payload: BootstrapRequest, database: Database = Depends(get_db)):
    """Create the first owner account if no owner exists yet."""
    users = UserStore(database)
    if users.owner_exists():
        raise HTTPException(status_code=400, detail="Owner already exists")
    try:
        user = users.create_user(payload.username, payload.password, Role.OWNER)
    except ValidationFailed as e:
        raise HTTPException(status_code=409, detail=str(e))
    logger.info("owner %s bootstrapped", user["username"])
    return user


# Utility endpoints
@app.get("/")
def root():
    return {"message": "Restaurant API running", "graphql": "/graphql"}


@app.get("/test")
def test_database(database: Database = Depends(get_db)):
    try:
        collections = database.list_collection_names()
        return {"backend": "ok", "database": "ok", "collections": collections}
    except PyMongoError as e:
        return {"backend": "ok", "database": f"error: {e}"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=config.PORT)
