import base64
import binascii
import re
import secrets
from io import BytesIO
from pathlib import Path
from typing import Dict, List, Optional

from flask import current_app
from werkzeug.datastructures import FileStorage
from werkzeug.utils import secure_filename

ALLOWED_IMAGE_EXTENSIONS = {"png", "jpg", "jpeg", "gif", "webp"}
LIBRARY_IMAGE_EXTENSIONS = ALLOWED_IMAGE_EXTENSIONS | {"svg"}
DATA_URL_PATTERN = re.compile(r"^data:(image/[^;]+);base64,(.+)$", re.DOTALL)


class FileTooLarge(ValueError):
    pass


def _random_filename(filename: str) -> str:
    random_hex = secrets.token_hex(8)
    name = secure_filename(Path(filename).name)
    return f"{random_hex}_{name}"


def is_library_image(name: str) -> bool:
    return Path(name).suffix.lower().strip(".") in LIBRARY_IMAGE_EXTENSIONS


def list_avatar_library(root: Optional[str] = None) -> Dict[str, List[str]]:
    """Map each folder of the avatar library to the image URLs it holds."""
    library = Path(root or current_app.config["AVATAR_LIBRARY_FOLDER"])
    result: Dict[str, List[str]] = {}
    if not library.is_dir():
        return result
    for folder in sorted(library.iterdir()):
        if not folder.is_dir():
            continue
        images = sorted(entry.name for entry in folder.iterdir() if entry.is_file() and is_library_image(entry.name))
        result[folder.name] = [f"/avatars/{folder.name}/{name}" for name in images]
    return result


def save_avatar(file: FileStorage) -> Optional[str]:
    if not file:
        return None

    extension = Path(file.filename).suffix.lower().strip(".")
    if extension not in ALLOWED_IMAGE_EXTENSIONS:
        raise ValueError("Unsupported file type for avatar.")

    filename = _random_filename(file.filename)
    upload_dir = Path(current_app.config["UPLOAD_FOLDER"]) / "avatars"
    upload_dir.mkdir(parents=True, exist_ok=True)
    file_path = upload_dir / filename
    file.save(file_path)
    return filename


def save_avatar_data_url(data_url: str) -> str:
    """Decode a ``data:image/...;base64,`` payload and store it as an avatar."""
    match = DATA_URL_PATTERN.match(data_url or "")
    if not match:
        raise ValueError("Invalid image data")
    mimetype, raw_data = match.group(1), match.group(2)
    extension = mimetype.split("/", 1)[1].split("+", 1)[0].lower()
    if extension == "jpeg":
        extension = "jpg"
    try:
        binary = base64.b64decode(raw_data, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise ValueError("Invalid image data") from exc
    if not binary:
        raise ValueError("Invalid image data")
    max_bytes = current_app.config["MAX_UPLOAD_MB"] * 1024 * 1024
    if len(binary) > max_bytes:
        raise FileTooLarge("File too large")
    stream = BytesIO(binary)
    stream.seek(0)
    storage = FileStorage(stream=stream, filename=f"avatar.{extension}", content_type=mimetype)
    return save_avatar(storage)


def remove_file(category: str, filename: str) -> None:
    folder = Path(current_app.config["UPLOAD_FOLDER"]) / category
    file_path = folder / filename
    if file_path.exists():
        try:
            file_path.unlink()
        except OSError:
            current_app.logger.warning("Could not remove %s/%s", category, filename)
