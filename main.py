from datetime import datetime
from typing import List, Optional

from fastapi import FastAPI, Depends, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from config import settings
from errors import ScoutError, Unauthenticated, ValidationFailed, Conflict
from logging_manager import get_logger
from schemas import User as UserSchema, Message as MessageSchema, Video as VideoSchema
from seed import create_session_store
from session import SessionStore, RegisterResult

logger = get_logger(prefix="[API]")

app = FastAPI(title=settings.APP_NAME)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ALLOW_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

store = create_session_store(settings)

# ------------ Helpers ------------

def get_store() -> SessionStore:
    return store

def get_current_user(s: SessionStore = Depends(get_store)) -> UserSchema:
    if not s.is_authenticated:
        raise Unauthenticated()
    return s.current_user

@app.exception_handler(ScoutError)
async def scout_error_handler(request: Request, exc: ScoutError):
    logger.warning(f"{request.method} {request.url.path} -> {exc.status_code}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})

# ------------ Models (request/response) ------------

class LoginRequest(BaseModel):
    email: str
    password: str

class RegisterRequest(BaseModel):
    name: str
    email: str
    password: str
    confirm_password: str

class ProfileUpdate(BaseModel):
    background_info: Optional[str] = None
    teams: Optional[List[str]] = None

class EmailChange(BaseModel):
    new_email: str
    password: str

class VideoCreate(BaseModel):
    title: str
    url: Optional[str] = None

class StartConversation(BaseModel):
    other_user_id: str

class MessageCreate(BaseModel):
    conversation_id: str
    content: str

class ConversationOut(BaseModel):
    id: str
    participants: List[UserSchema]
    messages: List[MessageSchema]
    last_message: Optional[MessageSchema] = None
    last_activity_timestamp: datetime

def conversation_out(s: SessionStore, conversation) -> ConversationOut:
    return ConversationOut(
        id=conversation.id,
        participants=s.conversation_participants(conversation),
        messages=conversation.messages,
        last_message=conversation.last_message,
        last_activity_timestamp=conversation.last_activity_timestamp,
    )

# ------------ Auth & Users ------------

@app.post("/auth/register", response_model=UserSchema, status_code=201)
def register(data: RegisterRequest, s: SessionStore = Depends(get_store)):
    result: RegisterResult = s.register(data.name, data.email, data.password, data.confirm_password)
    if not result.success:
        if result.error == "conflict":
            raise Conflict(result.reason)
        raise ValidationFailed(result.reason)
    return result.user

@app.post("/auth/login", response_model=UserSchema)
def login(data: LoginRequest, s: SessionStore = Depends(get_store)):
    return s.login(data.email, data.password)

@app.post("/auth/logout")
def logout(s: SessionStore = Depends(get_store)):
    s.logout()
    return {"ok": True}

@app.get("/me", response_model=UserSchema)
def me(current=Depends(get_current_user)):
    return current

@app.put("/me", response_model=UserSchema)
def replace_profile(updated: UserSchema, current=Depends(get_current_user), s: SessionStore = Depends(get_store)):
    if updated.id != current.id:
        raise ValidationFailed("Profile id does not match the logged in user")
    return s.update_profile(updated)

@app.patch("/me", response_model=UserSchema)
def update_profile(update: ProfileUpdate, current=Depends(get_current_user), s: SessionStore = Depends(get_store)):
    update_dict = {k: v for k, v in update.model_dump().items() if v is not None}
    if not update_dict:
        return current
    return s.update_profile(current.model_copy(update=update_dict, deep=True))

@app.post("/me/email", response_model=UserSchema)
def change_email(data: EmailChange, current=Depends(get_current_user), s: SessionStore = Depends(get_store)):
    return s.change_email(data.new_email, data.password)

@app.post("/me/videos", response_model=VideoSchema, status_code=201)
def upload_video(data: VideoCreate, current=Depends(get_current_user), s: SessionStore = Depends(get_store)):
    return s.upload_video(data.title, data.url)

@app.get("/users/{user_id}", response_model=UserSchema)
def get_user(user_id: str, s: SessionStore = Depends(get_store)):
    return s.get_user(user_id)

# ------------ Search ------------

@app.get("/search", response_model=List[UserSchema])
def search(q: str = "", s: SessionStore = Depends(get_store)):
    return s.search(q)

@app.get("/search/history")
def search_history(s: SessionStore = Depends(get_store)):
    return {"recent_searches": s.recent_searches}

@app.delete("/search/history")
def clear_search_history(s: SessionStore = Depends(get_store)):
    s.clear_search_history()
    return {"ok": True}

@app.get("/search/suggestions", response_model=List[UserSchema])
def suggestions(s: SessionStore = Depends(get_store)):
    return s.suggested_users()

# ------------ Conversations & Messages ------------

@app.get("/conversations", response_model=List[ConversationOut])
def my_conversations(q: Optional[str] = None, current=Depends(get_current_user), s: SessionStore = Depends(get_store)):
    return [conversation_out(s, c) for c in s.list_conversations(q)]

@app.post("/conversations/start", response_model=ConversationOut)
def start_conversation(data: StartConversation, current=Depends(get_current_user), s: SessionStore = Depends(get_store)):
    return conversation_out(s, s.start_conversation(data.other_user_id))

@app.get("/conversations/{conversation_id}/messages", response_model=List[MessageSchema])
def fetch_messages(conversation_id: str, current=Depends(get_current_user), s: SessionStore = Depends(get_store)):
    return s.get_conversation(conversation_id).messages

@app.post("/messages", response_model=MessageSchema, status_code=201)
def send_message(msg: MessageCreate, current=Depends(get_current_user), s: SessionStore = Depends(get_store)):
    return s.send_message(msg.conversation_id, msg.content)

# --------- Health ---------

@app.get("/")
def root():
    return {"message": f"{settings.APP_NAME} backend running"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("main:app", host="127.0.0.1", port=8000)
