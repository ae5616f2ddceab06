"""SSAP endpoint definitions for LG webOS TVs.

Paths are given without the ``ssap://`` scheme; the webOS client adds it.
"""

# Commands
POWER_OFF = "system/turnOff"
CREATE_TOAST = "system.notifications/createToast"
SET_VOLUME = "audio/setVolume"
SET_MUTE = "audio/setMute"
SWITCH_INPUT = "tv/switchInput"
LAUNCH = "system.launcher/launch"
OPEN = "system.launcher/open"
AM_LAUNCH = "com.webos.applicationManager/launch"
POINTER_INPUT_SOCKET = "com.webos.service.networkinput/getPointerInputSocket"

# Subscriptions
GET_VOLUME = "audio/getVolume"
GET_FOREGROUND_APP = "com.webos.applicationManager/getForegroundAppInfo"
GET_CURRENT_CHANNEL = "tv/getCurrentChannel"
GET_EXTERNAL_INPUTS = "tv/getExternalInputList"

# App IDs
LIVE_TV_APP = "com.webos.app.livetv"
APP_NETFLIX = "netflix"
APP_AMAZON = "amazon"
APP_WEB_VIDEO_CASTER = "com.instantbits.cast.webvideo"
APP_YOUTUBE = "youtube.leanback.v4"
APP_PLEX = "cdp-30"

NETFLIX_CONTENT_ID = "m=http://api.netflix.com/catalog/titles/movies/{title}&source_type=4"
YOUTUBE_CONTENT_TARGET = "https://www.youtube.com/tv?v={video}"


def ssap_uri(path: str) -> str:
    """Full SSAP URI for a path, used in log lines."""
    return f"ssap://{path}"
