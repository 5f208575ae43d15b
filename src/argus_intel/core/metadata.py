"""
Module for image metadata analysis (BEDA).

Decodes the metadata embedded in an uploaded JPEG or PNG into a flat tag map
and normalizes that map into a ``MetadataRecord``, the same result shape the
other producers return.
"""

import io
import logging
import math
import numbers
from typing import Any, Dict, Mapping, Optional

from PIL import Image
from PIL.ExifTags import GPSTAGS, TAGS

from .exceptions import MetadataDecodeError
from .schemas import GpsCoordinates, MetadataRecord, TagDescriptor

logger = logging.getLogger(__name__)

ACCEPTED_FORMATS = ("JPEG", "PNG")

# Tags never surfaced in the EXIF section of a record.
EXCLUDED_TAGS = frozenset(
    {
        "gps",
        "thumbnail",
        "Image-Look",
        "Image Width",
        "Image Height",
        "Interop",
        "icc",
        "MakerNote",
    }
)
_EXCLUDED_KEYS = frozenset(tag.casefold() for tag in EXCLUDED_TAGS)

IMAGE_TAGS = ("Image Width", "Image Height")

EXIF_IFD = 0x8769
GPS_IFD = 0x8825
INTEROP_IFD = 0xA005
_POINTER_TAGS = frozenset({EXIF_IFD, GPS_IFD, INTEROP_IFD})


# --- Decoding ---


def _describe(value: Any) -> str:
    if isinstance(value, bytes):
        text = value.rstrip(b"\x00")
        if text and all(32 <= b < 127 for b in text):
            return text.decode("ascii").strip()
        return f"[{len(value)} bytes]"
    if isinstance(value, str):
        return value.strip("\x00").strip()
    if isinstance(value, tuple):
        return ", ".join(_describe(v) for v in value)
    if isinstance(value, numbers.Integral):
        return str(value)
    if isinstance(value, numbers.Real):
        return f"{float(value):g}"
    return str(value)


def _to_degrees(value: Any) -> Optional[float]:
    try:
        degrees, minutes, seconds = (float(part) for part in value)
    except (TypeError, ValueError, ZeroDivisionError):
        return None
    result = degrees + minutes / 60 + seconds / 3600
    return None if math.isnan(result) else result


def _ref(value: Any) -> str:
    if isinstance(value, bytes):
        value = value.decode("ascii", "ignore")
    return str(value).strip("\x00").strip().upper()


def gps_block(gps_ifd: Mapping[int, Any]) -> Dict[str, float]:
    """
    Converts a raw GPS IFD into decimal ``Latitude``/``Longitude``/``Altitude``.

    Southern latitudes and western longitudes are negative. Coordinates that
    cannot be converted are left out.
    """
    named = {GPSTAGS.get(tag, tag): value for tag, value in gps_ifd.items()}
    block: Dict[str, float] = {}

    latitude = _to_degrees(named.get("GPSLatitude"))
    if latitude is not None:
        if _ref(named.get("GPSLatitudeRef", "N")) == "S":
            latitude = -latitude
        block["Latitude"] = latitude

    longitude = _to_degrees(named.get("GPSLongitude"))
    if longitude is not None:
        if _ref(named.get("GPSLongitudeRef", "E")) == "W":
            longitude = -longitude
        block["Longitude"] = longitude

    if "GPSAltitude" in named:
        try:
            altitude = float(named["GPSAltitude"])
        except (TypeError, ValueError, ZeroDivisionError):
            altitude = math.nan
        if not math.isnan(altitude):
            below_sea_level = named.get("GPSAltitudeRef") in (1, b"\x01")
            block["Altitude"] = -altitude if below_sea_level else altitude
    return block


def decode_image_metadata(data: bytes) -> Dict[str, Dict[str, Any]]:
    """
    Decodes the embedded metadata of a JPEG or PNG image.

    Args:
        data (bytes): The raw file contents.

    Returns:
        Dict[str, Dict[str, Any]]: Tag name to descriptor. Every descriptor has a
        ``description`` except ``gps``, which holds decimal coordinates.

    Raises:
        MetadataDecodeError: If the file is corrupt or not a JPEG/PNG.
    """
    try:
        with Image.open(io.BytesIO(data)) as img:
            if img.format not in ACCEPTED_FORMATS:
                raise MetadataDecodeError(
                    f"Unsupported image format: {img.format}. Use JPEG or PNG."
                )
            width, height = img.size
            tags: Dict[str, Dict[str, Any]] = {
                "FileType": {"description": img.format},
                "Image Width": {"description": f"{width}px"},
                "Image Height": {"description": f"{height}px"},
            }

            exif = img.getexif()
            for tag, value in exif.items():
                if tag not in _POINTER_TAGS:
                    tags[TAGS.get(tag, f"Tag 0x{tag:04X}")] = {
                        "description": _describe(value)
                    }
            for tag, value in exif.get_ifd(EXIF_IFD).items():
                if tag not in _POINTER_TAGS:
                    tags[TAGS.get(tag, f"Tag 0x{tag:04X}")] = {
                        "description": _describe(value)
                    }

            interop = exif.get_ifd(INTEROP_IFD)
            if interop:
                tags["Interop"] = {"description": f"{len(interop)} entries"}

            gps = gps_block(exif.get_ifd(GPS_IFD))
            if gps:
                tags["gps"] = gps

            icc_profile = img.info.get("icc_profile")
            if icc_profile:
                tags["icc"] = {"description": f"[{len(icc_profile)} bytes]"}

            if img.format == "PNG":
                for key, value in getattr(img, "text", {}).items():
                    tags.setdefault(key, {"description": _describe(value)})
            return tags
    except MetadataDecodeError:
        raise
    except Exception as e:
        logger.error("Could not decode image metadata: %s", e)
        raise MetadataDecodeError(f"Could not process image: {e}") from e


# --- Normalization ---


def format_file_size(size_in_bytes: int) -> str:
    """Formats a byte count in kilobytes with two decimals, whatever its magnitude."""
    return f"{size_in_bytes / 1024:.2f} KB"


def _description(descriptor: Any) -> Optional[str]:
    if isinstance(descriptor, Mapping):
        description = descriptor.get("description")
    else:
        description = getattr(descriptor, "description", None)
    if description is None or description == "":
        return None
    return str(description)


def _is_coordinate(value: Any) -> bool:
    return (
        isinstance(value, numbers.Real)
        and not isinstance(value, bool)
        and math.isfinite(value)
    )


def _normalize_gps(raw: Any) -> Optional[GpsCoordinates]:
    if not isinstance(raw, Mapping):
        return None
    block: Dict[str, Any] = {}
    for key, value in raw.items():
        key = str(key)
        if key.casefold() in ("latitude", "longitude"):
            if _is_coordinate(value):
                block[key.capitalize()] = float(value)
        else:
            block[key] = value
    return GpsCoordinates.model_validate(block)


def normalize_metadata(
    tags: Mapping[str, Any], file_name: str, file_size: int
) -> MetadataRecord:
    """
    Normalizes a raw tag map into a ``MetadataRecord``.

    Width and height go to ``image``; every other tag outside the exclusion
    set (matched case-insensitively) that has a non-empty description goes to
    ``exif``. The GPS block keeps whatever structure it had, minus
    non-numeric coordinates. The function is pure.

    Args:
        tags (Mapping[str, Any]): Tag name to descriptor, as decoded.
        file_name (str): The uploaded file's name.
        file_size (int): The uploaded file's size in bytes.

    Returns:
        MetadataRecord: The normalized record.
    """
    image: Dict[str, TagDescriptor] = {}
    for name in IMAGE_TAGS:
        description = _description(tags.get(name))
        if description is not None:
            image[name] = TagDescriptor(description=description)

    exif: Dict[str, TagDescriptor] = {}
    for key, descriptor in tags.items():
        name = str(key)
        if name.casefold() in _EXCLUDED_KEYS:
            continue
        description = _description(descriptor)
        if description is not None:
            exif[name] = TagDescriptor(description=description)

    return MetadataRecord(
        file_name=file_name,
        file_size=format_file_size(file_size),
        image=image,
        exif=exif,
        gps=_normalize_gps(tags.get("gps")),
    )


def analyze_image_upload(file_name: str, data: bytes) -> MetadataRecord:
    """Decodes and normalizes an uploaded image in one step."""
    tags = decode_image_metadata(data)
    record = normalize_metadata(tags, file_name, len(data))
    logger.info(
        "Extracted %d EXIF tags from %s (%s).",
        len(record.exif),
        file_name,
        record.file_size,
    )
    return record
