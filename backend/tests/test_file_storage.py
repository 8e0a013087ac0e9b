import asyncio
import io

import pytest
from fastapi import UploadFile

from filebox.errors import FileTooLargeError
from filebox.services.file_storage import build_stored_name, sanitize_extension


@pytest.mark.parametrize("name, expected", [
    ("report.pdf", ".pdf"),
    ("archive.tar.gz", ".gz"),
    ("README", ""),
    (".bashrc", ""),
    ("photo.JPG", ".JPG"),
    ("evil.p$h%p", ".php"),
    ("x.t xt", ".txt"),
    ("../../etc/passwd.sh", ".sh"),
    ("name.éxe", ".xe"),
])
def test_sanitize_extension(name, expected):
    assert sanitize_extension(name) == expected


def test_build_stored_name():
    assert build_stored_name("abc", "My File.docx") == "abc.docx"
    assert build_stored_name("abc", "noext") == "abc"


def test_save_upload_writes_bytes(storage):
    upload = UploadFile(file=io.BytesIO(b"hello world"), filename="hello.txt")

    written = asyncio.run(storage.save_upload(upload, "id1.txt"))

    assert written == 11
    assert storage.path_for("id1.txt").read_bytes() == b"hello world"


def test_save_upload_accepts_exact_limit(storage):
    data = b"x" * storage.max_file_size
    upload = UploadFile(file=io.BytesIO(data), filename="full.bin")

    assert asyncio.run(storage.save_upload(upload, "full.bin")) == len(data)


def test_save_upload_over_limit_leaves_nothing(storage):
    upload = UploadFile(file=io.BytesIO(b"x" * (storage.max_file_size + 1)), filename="big.bin")

    with pytest.raises(FileTooLargeError):
        asyncio.run(storage.save_upload(upload, "big.bin"))
    assert not storage.exists("big.bin")


def test_delete_tolerates_missing_file(storage):
    storage.path_for("gone.txt").write_bytes(b"bye")

    assert asyncio.run(storage.delete("gone.txt")) is True
    assert asyncio.run(storage.delete("gone.txt")) is False
