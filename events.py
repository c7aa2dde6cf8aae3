# Wire-level event names. Clients depend on these exact spellings.

# client -> server
JOIN_ROOM = "join-room"
LEAVE_ROOM = "leave-room"
OFFER = "offer"
ANSWER = "answer"
ICE_CANDIDATE = "ice-candidate"
CONNECTION_STATUS = "connection-status"

# server -> client
CONNECTED = "connected"
ROOM_JOINED = "room-joined"
USER_JOINED = "user-joined"
USER_LEFT = "user-left"
ERROR = "error"

NEGOTIATION_EVENTS = (OFFER, ANSWER, ICE_CANDIDATE)
