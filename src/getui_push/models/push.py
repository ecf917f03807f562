"""
Push payloads for single, list (two-phase) and app-wide pushes.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field, field_validator


class Message(BaseModel):
    appkey: Optional[str] = None
    is_offline: bool = False
    msgtype: str = "notification"
    offline_expire_time: Optional[int] = None


class NotificationStyle(BaseModel):
    type: int = 0
    text: str = ""
    title: str = ""


class Notification(BaseModel):
    style: NotificationStyle = Field(default_factory=NotificationStyle)
    transmission_type: bool = False
    transmission_content: str = ""


class Alert(BaseModel):
    title: Optional[str] = None
    body: Optional[str] = None


class Aps(BaseModel):
    alert: Alert = Field(default_factory=Alert)
    auto_badge: Optional[str] = Field(default=None, alias="autoBadge")
    content_available: Optional[int] = Field(default=None, alias="content-available")

    model_config = {"populate_by_name": True}


class Multimedia(BaseModel):
    url: Optional[str] = None
    type: Optional[int] = None
    only_wifi: Optional[bool] = None


class PushInfo(BaseModel):
    """APNs payload for iOS devices"""
    aps: Aps = Field(default_factory=Aps)
    multimedia: Optional[list[Multimedia]] = None


class SinglePush(BaseModel):
    message: Message = Field(default_factory=Message)
    notification: Notification = Field(default_factory=Notification)
    cid: Optional[str] = None
    alias: Optional[str] = None
    requestid: Optional[str] = None
    push_info: Optional[PushInfo] = None


class ListPush(BaseModel):
    message: Message = Field(default_factory=Message)
    notification: Notification = Field(default_factory=Notification)
    cid: Optional[list[str]] = None
    alias: Optional[list[str]] = None
    push_info: Optional[PushInfo] = None
    taskid: Optional[str] = None
    need_detail: bool = True

    @field_validator("cid", "alias", mode="before")
    @classmethod
    def _single_target(cls, v):
        if isinstance(v, str):
            return [v]
        return v


class SaveListBody(BaseModel):
    """save_list_body request: the message shared by every target of a list push."""
    message: Message = Field(default_factory=Message)
    notification: Notification = Field(default_factory=Notification)
    push_info: Optional[PushInfo] = None


class AppCondition(BaseModel):
    key: str
    values: list[str] = Field(default_factory=list)
    opt_type: str = "or"


class AppPush(BaseModel):
    message: Message = Field(default_factory=Message)
    notification: Notification = Field(default_factory=Notification)
    condition: Optional[list[AppCondition]] = None
    requestid: Optional[str] = None
    push_info: Optional[PushInfo] = None
