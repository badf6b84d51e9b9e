import pytest
from pymongo.errors import PyMongoError

import config
import storage
from database import get_document, update_document
from migrate_images import bundled_images, main as migrate_main, migrate_images
from storage import StorageError, bucket


def test_upload_without_upsert_refuses_to_overwrite(db):
    images = bucket(db, "product-images")
    images.upload("hat.jpg", b"v1", content_type="image/jpeg")
    with pytest.raises(StorageError):
        images.upload("hat.jpg", b"v2")
    images.upload("hat.jpg", b"v2", upsert=True)
    assert images.download("hat.jpg")["data"] == b"v2"
    assert db["storage_object"].count_documents({}) == 1


def test_public_url_and_route(client, db):
    images = bucket(db, "product-images")
    images.upload("/turtle.png", b"\x89PNG", content_type="image/png")
    url = images.get_public_url("turtle.png")
    assert url == f"{config.PUBLIC_BASE_URL}/storage/v1/object/public/product-images/turtle.png"

    res = client.get("/storage/v1/object/public/product-images/turtle.png")
    assert res.status_code == 200
    assert res.content == b"\x89PNG"
    assert res.headers["content-type"] == "image/png"
    assert client.get("/storage/v1/object/public/product-images/missing.png").status_code == 404


def test_bundled_images_lists_only_images(tmp_path):
    (tmp_path / "a.jpg").write_bytes(b"a")
    (tmp_path / "notes.txt").write_text("x")
    assert bundled_images(str(tmp_path)) == {"a.jpg": str(tmp_path / "a.jpg")}
    assert bundled_images(str(tmp_path / "nope")) == {}


def test_migrate_images_rewrites_matching_products(db, make_product, tmp_path):
    (tmp_path / "crochet-sea-turtle.jpg").write_bytes(b"turtle")
    turtle = make_product(image_url="/src/assets/crochet-sea-turtle.jpg")
    missing = make_product(image_url="/src/assets/not-bundled.jpg")
    bare = make_product()

    summary = migrate_images(db, str(tmp_path))
    assert summary == {"migrated": 1, "skipped": 2, "failed": 0}

    expected = bucket(db, config.PRODUCT_IMAGES_BUCKET).get_public_url("crochet-sea-turtle.jpg")
    assert get_document(db, "product", turtle)["image_url"] == expected
    assert get_document(db, "product", missing)["image_url"] == "/src/assets/not-bundled.jpg"
    assert get_document(db, "product", bare)["image_url"] is None
    stored = bucket(db, config.PRODUCT_IMAGES_BUCKET).download("crochet-sea-turtle.jpg")
    assert stored["data"] == b"turtle"
    assert stored["content_type"] == "image/jpeg"

    # Public URLs keep the file name, so earlier products are uploaded again in place
    (tmp_path / "crochet-sea-turtle.jpg").write_bytes(b"turtle v2")
    make_product(image_url="/src/assets/crochet-sea-turtle.jpg")
    assert migrate_images(db, str(tmp_path))["migrated"] == 2


def test_migrate_cli_without_database(monkeypatch):
    monkeypatch.setattr("database.db", None)
    assert migrate_main(["--assets", "."]) == 1


def test_admin_image_upload_and_migration_endpoint(client, signup, make_product, tmp_path, monkeypatch):
    admin = signup(role="admin")
    files = {"file": ("bookmark.jpg", b"jpegbytes", "image/jpeg")}
    res = client.post("/api/admin/images", files=files, headers=admin)
    assert res.status_code == 201
    assert res.json()["public_url"].endswith("/product-images/bookmark.jpg")
    assert client.post("/api/admin/images", files=files, headers=admin).status_code == 409
    assert client.post("/api/admin/images", params={"upsert": "true"}, files=files, headers=admin).status_code == 201

    (tmp_path / "crochet-bookmark.jpg").write_bytes(b"bm")
    make_product(image_url="/src/assets/crochet-bookmark.jpg")
    monkeypatch.setattr(config, "ASSETS_DIR", str(tmp_path))
    body = client.post("/api/admin/migrate-images", headers=admin).json()
    assert body["message"] == "Images migrated successfully!"
    assert body["migrated"] == 1


def test_failed_products_are_counted_and_the_run_continues(db, make_product, tmp_path, monkeypatch):
    for name in ("a.jpg", "b.jpg", "c.jpg"):
        (tmp_path / name).write_bytes(name.encode())
    upload_fails = make_product(image_url="/src/assets/a.jpg")
    update_fails = make_product(image_url="/src/assets/b.jpg")
    ok = make_product(image_url="/src/assets/c.jpg")

    real_upload = storage.Bucket.upload

    def failing_upload(self, path, data, **kwargs):
        if path == "a.jpg":
            raise StorageError("upload failed")
        return real_upload(self, path, data, **kwargs)

    def failing_update(database, collection_name, doc_id, fields):
        if doc_id == update_fails:
            raise PyMongoError("update failed")
        return update_document(database, collection_name, doc_id, fields)

    monkeypatch.setattr(storage.Bucket, "upload", failing_upload)
    monkeypatch.setattr("migrate_images.update_document", failing_update)

    assert migrate_images(db, str(tmp_path)) == {"migrated": 1, "skipped": 0, "failed": 2}
    assert get_document(db, "product", upload_fails)["image_url"] == "/src/assets/a.jpg"
    assert get_document(db, "product", update_fails)["image_url"] == "/src/assets/b.jpg"
    assert get_document(db, "product", ok)["image_url"].endswith("/product-images/c.jpg")


def test_listing_failure_aborts_the_run(db, tmp_path, monkeypatch):
    def boom(*args, **kwargs):
        raise PyMongoError("list failed")

    monkeypatch.setattr("migrate_images.get_documents", boom)
    with pytest.raises(PyMongoError):
        migrate_images(db, str(tmp_path))

    monkeypatch.setattr("database.db", db)
    assert migrate_main(["--assets", str(tmp_path)]) == 1
