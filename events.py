# Client -> server
CHECK_ROOM = "check-room"
CREATE_ROOM = "create-room"
JOIN_ROOM = "join-room"
LEAVE_ROOM = "leave-room"
OFFER = "offer"
ANSWER = "answer"
ICE_CANDIDATE = "ice-candidate"
VIDEO_STATE_CHANGE = "video-state-change"
NOTE_MESSAGE = "note-message"

# Server -> client
CONNECTED = "connected" # {id} - sent once after accept
ROOM_EXISTS = "room-exists" # {exists}
ROOM_CREATED = "room-created" # {roomId}
ROOM_NOT_FOUND = "room-not-found" # {}
ALL_USERS = "all-users" # {ids} - other members in join order
INITIAL_VIDEO_STATES = "initial-video-states" # {states} - other member id -> video flag
USER_JOINED = "user-joined" # {id}
USER_DISCONNECTED = "user-disconnected" # {id}
REMOTE_VIDEO_STATE_CHANGE = "remote-video-state-change" # {userId, enabled}
REMOTE_NOTE_MESSAGE = "remote-note-message" # {userId, payload}
ERROR = "error" # {code, message}

# `offer`, `answer` and `ice-candidate` keep their names when forwarded:
# - offer/answer: {sdp, caller}
# - ice-candidate: {candidate, from}
