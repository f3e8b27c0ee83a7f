from __future__ import annotations

from typing import Any, Dict, Optional, Union

from fastapi import APIRouter, Depends, FastAPI, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from movie_notes import __version__
from movie_notes.auth import SessionClaims, TokenIssuer, get_current_user, signin, signup
from movie_notes.config import Config
from movie_notes.db import Database
from movie_notes.errors import ApiError, ValidationError
from movie_notes.pagination import paginate, parse_page
from movie_notes.repository import (
    FavoriteStore,
    NoteStore,
    SqlFavoriteRepository,
    SqlNoteRepository,
    SqlUserRepository,
    UserStore,
)


def _debug(msg: str) -> None:
    print(f"[api] {msg}")


router = APIRouter()


# -----------------------------
# Request bodies
# -----------------------------
# Every field is optional: presence is checked by the handlers so that a
# missing field yields the documented 400 message instead of a schema error.


class SignupRequest(BaseModel):
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None
    age: Optional[int] = None


class SigninRequest(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None


class FavoriteRequest(BaseModel):
    movieName: Optional[str] = None
    imgUrl: Optional[str] = None
    movieID: Optional[Union[str, int]] = None
    # Accepted for client compatibility; the owner always comes from the token.
    userID: Optional[str] = None


class NoteRequest(BaseModel):
    title: Optional[str] = None
    desc: Optional[str] = None


class NoteIdRequest(BaseModel):
    NoteID: Optional[str] = None


class UpdateNoteRequest(NoteIdRequest):
    title: Optional[str] = None
    desc: Optional[str] = None


# -----------------------------
# Dependencies
# -----------------------------


def _users(request: Request) -> UserStore:
    return request.app.state.users


def _favorites(request: Request) -> FavoriteStore:
    return request.app.state.favorites


def _notes(request: Request) -> NoteStore:
    return request.app.state.notes


def _issuer(request: Request) -> TokenIssuer:
    return request.app.state.issuer


def _require_note_id(note_id: Optional[str]) -> str:
    nid = (note_id or "").strip()
    if not nid:
        raise ValidationError("Missing fields")
    return nid


# -----------------------------
# Health
# -----------------------------


@router.get("/health")
def health() -> Dict[str, Any]:
    return {"status": "ok"}


# -----------------------------
# Accounts
# -----------------------------


@router.post("/signup")
def signup_route(payload: SignupRequest, users: UserStore = Depends(_users)) -> Dict[str, Any]:
    user = signup(
        users,
        first_name=payload.first_name,
        last_name=payload.last_name,
        email=payload.email,
        password=payload.password,
        age=payload.age,
    )
    _debug(f"Signed up user id={user['_id']}")
    return {"message": "success", "user": user}


@router.post("/signin")
def signin_route(
    payload: Optional[SigninRequest] = None,
    users: UserStore = Depends(_users),
    issuer: TokenIssuer = Depends(_issuer),
) -> Dict[str, Any]:
    # Only the token is returned here; the user record comes back from /signup.
    payload = payload or SigninRequest()
    token = signin(users, issuer, email=payload.email, password=payload.password)
    return {"message": "success", "token": token}


@router.get("/getAllUsers")
def get_all_users(
    page: Optional[str] = Query(None),
    users: UserStore = Depends(_users),
) -> Dict[str, Any]:
    result = paginate(users.list_public(), parse_page(page))
    return {
        "message": "success",
        "Total": result.total,
        "Page": result.page,
        "TotalPages": result.total_pages,
        "Users": result.items,
    }


# -----------------------------
# Favorites
# -----------------------------


@router.post("/addToFavorites")
def add_to_favorites(
    payload: FavoriteRequest,
    user: SessionClaims = Depends(get_current_user),
    favorites: FavoriteStore = Depends(_favorites),
) -> Dict[str, Any]:
    fav = favorites.create(
        user_id=user.id,
        movie_name=payload.movieName,
        img_url=payload.imgUrl,
        movie_id=None if payload.movieID is None else str(payload.movieID),
    )
    return {"message": "success", "favorite": fav}


@router.get("/getFavorites")
def get_favorites(
    user: SessionClaims = Depends(get_current_user),
    favorites: FavoriteStore = Depends(_favorites),
) -> Dict[str, Any]:
    return {"message": "success", "Favorites": favorites.list_for_user(user.id)}


# -----------------------------
# Notes
# -----------------------------


@router.post("/addNote")
def add_note(
    payload: NoteRequest,
    user: SessionClaims = Depends(get_current_user),
    notes: NoteStore = Depends(_notes),
) -> Dict[str, Any]:
    note = notes.create(user_id=user.id, title=payload.title, desc=payload.desc)
    return {"message": "success", "note": note}


@router.get("/getUserNotes")
def get_user_notes(
    user: SessionClaims = Depends(get_current_user),
    notes: NoteStore = Depends(_notes),
) -> Dict[str, Any]:
    return {"message": "success", "Notes": notes.list_for_user(user.id)}


@router.delete("/deleteNote")
def delete_note(
    payload: NoteIdRequest,
    user: SessionClaims = Depends(get_current_user),
    notes: NoteStore = Depends(_notes),
) -> Dict[str, Any]:
    # Absent or foreign notes are a silent no-op.
    notes.delete_owned(_require_note_id(payload.NoteID), user.id)
    return {"message": "success"}


@router.put("/updateNote")
def update_note(
    payload: UpdateNoteRequest,
    user: SessionClaims = Depends(get_current_user),
    notes: NoteStore = Depends(_notes),
) -> Dict[str, Any]:
    notes.update_owned(
        _require_note_id(payload.NoteID),
        user.id,
        title=payload.title,
        desc=payload.desc,
    )
    return {"message": "success"}


# -----------------------------
# Error mapping
# -----------------------------


async def _api_error_handler(request: Request, exc: ApiError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict(), headers=exc.headers)


async def _request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    if errors and all(e.get("type") == "missing" for e in errors):
        message = "Missing fields"
    else:
        message = "Invalid request body"
    fields = ", ".join(".".join(str(p) for p in e.get("loc", ())) for e in errors)
    return JSONResponse(status_code=400, content={"message": message, "details": fields})


async def _unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    _debug(f"Unhandled error on {request.method} {request.url.path}: {type(exc).__name__}: {exc}")
    return JSONResponse(status_code=500, content={"message": "Server error", "details": str(exc)})


# -----------------------------
# App factory
# -----------------------------


def create_app(cfg: Config, *, db: Optional[Database] = None) -> FastAPI:
    """Build the API around one shared Database handle.

    The signing secret is validated here, so an app without one cannot exist.
    """
    app = FastAPI(title="Movie Notes API", version=__version__)

    database = db or Database(cfg.DB_DSN)
    app.state.cfg = cfg
    app.state.db = database
    app.state.issuer = TokenIssuer(cfg.JWT_SECRET)
    app.state.users = SqlUserRepository(database)
    app.state.favorites = SqlFavoriteRepository(database)
    app.state.notes = SqlNoteRepository(database)

    origins = cfg.cors_origins()
    if origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=origins,
            allow_credentials="*" not in origins,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    app.add_exception_handler(ApiError, _api_error_handler)
    app.add_exception_handler(RequestValidationError, _request_validation_handler)
    app.add_exception_handler(Exception, _unhandled_error_handler)

    app.include_router(router)
    return app
