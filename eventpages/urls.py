LOGIN_URL = "/login"
SIGNUP_URL = "/signup"
LOGOUT_URL = "/logout"
CONFIRM_EMAIL_URL = "/confirm-email"

DASHBOARD_URL = "/dashboard"
CREATE_EVENT_URL = "/events/create"
EDIT_EVENT_URL = "/events/{event_id}/edit"
DELETE_EVENT_URL = "/events/{event_id}/delete"
PUBLISH_EVENT_URL = "/events/{event_id}/publish"
EVENT_GUESTS_URL = "/events/{event_id}/guests"

PUBLIC_EVENT_URL = "/event/{event_id}"
PUBLIC_RSVP_URL = "/event/{event_id}/rsvp"
RESERVE_GIFT_URL = "/event/{event_id}/gifts/{gift_id}/reserve"
