from __future__ import annotations

import base64
import binascii
import io
from dataclasses import dataclass
from typing import Optional, Union

from PIL import Image, UnidentifiedImageError

from ..common.coordinates import Coordinate
from ..core.exceptions import SensorUnavailable


@dataclass(frozen=True)
class PunchCapture:
    """Raw device readings sent with a punch.

    photo is either raw image bytes, a ``data:image/...;base64,`` URL, or an
    http(s) URL of an already uploaded picture.
    """

    coords: Optional[Coordinate]
    photo: Union[bytes, str, None] = None
    accuracy_meters: Optional[float] = None


@dataclass(frozen=True)
class ValidCapture:
    coords: Coordinate
    photo: Optional[str]
    accuracy_meters: Optional[float] = None


def _verified_format(raw: bytes) -> str:
    try:
        with Image.open(io.BytesIO(raw)) as img:
            img.verify()
            return (img.format or "jpeg").lower()
    except (UnidentifiedImageError, OSError, SyntaxError, ValueError):
        raise SensorUnavailable("La foto capturada no es válida. Intente de nuevo.")


def normalize_photo(photo: Union[bytes, str, None]) -> Optional[str]:
    """Verify the picture and return the text stored on the shift record."""
    if photo is None or photo == "" or photo == b"":
        return None

    if isinstance(photo, (bytes, bytearray)):
        raw = bytes(photo)
        fmt = _verified_format(raw)
        return f"data:image/{fmt};base64,{base64.b64encode(raw).decode('ascii')}"

    text = photo.strip()
    if text.startswith(("http://", "https://")):
        return text
    if text.startswith("data:image/") and "," in text:
        try:
            raw = base64.b64decode(text.split(",", 1)[1], validate=True)
        except (binascii.Error, ValueError):
            raise SensorUnavailable("La foto capturada no es válida. Intente de nuevo.")
        _verified_format(raw)
        return text

    raise SensorUnavailable("La foto capturada no es válida. Intente de nuevo.")


def validate_capture(
    capture: PunchCapture,
    *,
    require_photo: bool = True,
    max_accuracy_meters: Optional[float] = None,
) -> ValidCapture:
    """Reject missing or unusable sensor data before anything is written."""
    if capture.coords is None:
        raise SensorUnavailable("No se pudo obtener la ubicación. Verifique los permisos.")
    if not capture.coords.is_in_range():
        raise SensorUnavailable("Coordenadas fuera de rango. Intente de nuevo.")
    if (
        max_accuracy_meters is not None
        and capture.accuracy_meters is not None
        and capture.accuracy_meters > max_accuracy_meters
    ):
        raise SensorUnavailable(
            f"Precisión de ubicación insuficiente ({round(capture.accuracy_meters)}m). Intente de nuevo."
        )

    photo = normalize_photo(capture.photo)
    if require_photo and photo is None:
        raise SensorUnavailable("No se pudo capturar la foto. Verifique los permisos de la cámara.")

    return ValidCapture(coords=capture.coords, photo=photo, accuracy_meters=capture.accuracy_meters)
