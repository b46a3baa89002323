"""User-facing messages, per locale."""

DEFAULT_LOCALE = "es"

MESSAGES: dict[str, dict[str, str]] = {
    "es": {
        "suggestion_failed": "Error al obtener sugerencia. Intenta de nuevo.",
        "suggestion_query_empty": "Escribe una plataforma o caso de uso.",
        "oracle_unavailable": "Las sugerencias de tamaño no están configuradas.",
        "item_not_found": "Imagen no encontrada.",
        "item_not_ready": "La imagen no está lista para descargar.",
        "item_failed": "Error al procesar.",
        "nothing_to_export": "No hay imágenes procesadas.",
        "empty_upload": "El archivo está vacío.",
    },
    "en": {
        "suggestion_failed": "Could not get a suggestion. Please try again.",
        "suggestion_query_empty": "Type a platform or use case.",
        "oracle_unavailable": "Size suggestions are not configured.",
        "item_not_found": "Image not found.",
        "item_not_ready": "The image is not ready for download.",
        "item_failed": "Processing failed.",
        "nothing_to_export": "There are no processed images.",
        "empty_upload": "The file is empty.",
    },
}


def get_message(key: str, locale: str = DEFAULT_LOCALE) -> str:
    """Look up a message, falling back to the default locale.

    Raises:
        KeyError: If the key is unknown in the default locale too
    """
    catalog = MESSAGES.get(locale, MESSAGES[DEFAULT_LOCALE])
    if key in catalog:
        return catalog[key]
    return MESSAGES[DEFAULT_LOCALE][key]
