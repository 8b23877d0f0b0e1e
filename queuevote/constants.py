"""Application constants."""

SPOTIFY_SCOPES = [
    "user-read-private",
    "user-read-email",
    "user-read-playback-state",
    "user-modify-playback-state",  # add to queue
]

HELP_TEXT = (
    "Sende eine Spotify-URL, um einen Musikwunsch zu stellen.\n"
    "Dies geht direkt in der Spotify-App über <b>Teilen</b> &gt; <b>Link teilen</b>.\n\n"
    "Beispiel: https://open.spotify.com/track/5hvIZF56tE8sAwMA9cKmQQ\n\n"
    "Befehle:\n"
    "/help — diese Hilfe anzeigen\n"
    "/id — Chat- und Thread-ID anzeigen"
)

ADMIN_HELP_TEXT = HELP_TEXT + "\n/spotifylogin — Spotify verknüpfen (nur Abstimmungs-Chat)"

USAGE_HINT = "Keine gültige Spotify-URL. Sende /help für Hilfe."

RATE_LIMIT_MESSAGE = "Limit überschritten, bitte warten!"

ALREADY_HANDLED_MESSAGE = "Diese Anfrage wurde bereits bearbeitet."

ACCEPT_LABEL = "✅ In Queue"
DECLINE_LABEL = "❌ Löschen"
