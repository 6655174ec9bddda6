import logging


def create_page(client, name, content="Some **content**", files=None, id=None, path=None):
    data = {"Name": name, "Content": content}
    if id is not None:
        data["Id"] = str(id)
    return client.post(f"/{path or name}", data=data, files=files, follow_redirects=False)


# ========== HOME ==========
def test_home_redirects_when_missing(client):
    response = client.get("/", follow_redirects=False)
    assert response.status_code == 303
    assert response.headers["location"] == "/home-page"

    # la redirection ouvre l'éditeur sur un brouillon vide
    data = client.get("/").json()
    assert data["editor"] is True
    assert data["name"] == "home-page"
    assert data["content"] == ""
    assert data["id"] is None

def test_home_page_after_creation(client):
    response = create_page(client, "home-page", "Welcome\nto the wiki")
    assert response.status_code == 303
    assert response.headers["location"] == "/home-page"

    response = client.get("/")
    assert response.status_code == 200
    data = response.json()
    assert data["name"] == "home-page"
    assert data["title"] == "Home Page"
    assert "<br>" in data["html"]

def test_home_page_name_cannot_change(client):
    response = create_page(client, "other-name", path="home-page")
    assert response.status_code == 400
    assert "Name" in response.json()["detail"]


# ========== SAVE ==========
def test_create_page_redirects_to_kebab_name(client):
    response = create_page(client, "Getting Started", "# Hi\nWorld", path="getting-started")
    assert response.status_code == 303
    assert response.headers["location"] == "/getting-started"

    data = client.get("/getting-started").json()
    assert data["content"] == "# Hi\nWorld"
    assert "<h1>Hi</h1>" in data["html"]

def test_create_page_requires_name_and_content(client):
    response = create_page(client, "", "", path="blank")
    assert response.status_code == 400
    detail = response.json()["detail"]
    assert detail["Name"] == ["Name is required"]
    assert detail["Content"] == ["Content is required"]

def test_create_page_name_with_only_markup(client):
    response = create_page(client, "<script>x</script>", path="blank")
    assert response.status_code == 400
    assert response.json()["detail"]["Name"] == ["Name must contain text"]

def test_create_page_invalid_id(client):
    response = create_page(client, "page", id="abc")
    assert response.status_code == 400

def test_update_page(client, wiki):
    create_page(client, "notes", "v1")
    page = wiki.get_page("notes").page

    response = create_page(client, "notes", "v2", id=page.id)
    assert response.status_code == 303
    assert client.get("/notes").json()["content"] == "v2"
    assert client.get("/notes").json()["id"] == page.id

def test_storage_failure_is_500(client, wiki, monkeypatch):
    def broken_session():
        raise RuntimeError("disk is gone")

    monkeypatch.setattr(wiki, "_session_factory", broken_session)
    response = create_page(client, "page")
    assert response.status_code == 500
    assert response.json()["detail"] == "Problem in saving page"


# ========== READ ==========
def test_read_page_is_case_insensitive(client):
    create_page(client, "notes")
    response = client.get("/NOTES")
    assert response.status_code == 200
    assert response.json()["name"] == "notes"

def test_read_missing_page(client):
    response = client.get("/missing")
    assert response.status_code == 200
    data = response.json()
    assert data["editor"] is True
    assert data["name"] == "missing"
    assert data["can_delete"] is False

def test_read_existing_page_is_not_a_draft(client):
    create_page(client, "notes")
    assert client.get("/notes").json()["editor"] is False

def test_read_storage_failure_is_500(client, wiki, monkeypatch):
    def broken_session():
        raise RuntimeError("disk is gone")

    monkeypatch.setattr(wiki, "_session_factory", broken_session)
    for url in ("/", "/notes", "/edit?pageName=notes", "/attachment?fileId=x"):
        response = client.get(url, follow_redirects=False)
        assert response.status_code == 500, url
    assert client.get("/pages").json() == []

def test_read_page_sanitizes_html(client):
    create_page(client, "xss", "<script>alert(1)</script>**bold**")
    data = client.get("/xss").json()
    assert "<strong>bold</strong>" in data["html"]
    assert "<script" not in data["html"]
    # le source reste intact pour l'édition
    assert data["content"] == "<script>alert(1)</script>**bold**"

def test_list_pages(client):
    create_page(client, "zebra")
    create_page(client, "alpha")
    response = client.get("/pages")
    assert response.status_code == 200
    assert [p["name"] for p in response.json()] == ["alpha", "zebra"]
    assert response.json()[0]["title"] == "Alpha"

def test_new_page_redirect(client):
    response = client.get("/new-page", params={"pageName": "Getting Started"}, follow_redirects=False)
    assert response.status_code == 303
    assert response.headers["location"] == "/getting-started"

def test_new_page_without_name(client):
    response = client.get("/new-page", follow_redirects=False)
    assert response.headers["location"] == "/"

def test_edit_page(client):
    create_page(client, "home-page")
    create_page(client, "notes")

    assert client.get("/edit", params={"pageName": "home-page"}).json()["can_delete"] is False
    assert client.get("/edit", params={"pageName": "notes"}).json()["can_delete"] is True
    assert client.get("/edit", params={"pageName": "missing"}).status_code == 404


# ========== ATTACHMENTS ==========
def test_upload_and_download_attachment(client):
    files = {"Attachment": ("report.csv", b"a,b\n1,2\n", "text/csv")}
    response = create_page(client, "reports", files=files)
    assert response.status_code == 303

    page = client.get("/reports").json()
    assert len(page["attachments"]) == 1
    attachment = page["attachments"][0]
    assert attachment["file_name"] == "report.csv"

    response = client.get("/attachment", params={"fileId": attachment["file_id"]})
    assert response.status_code == 200
    assert response.content == b"a,b\n1,2\n"
    assert response.headers["content-type"].startswith("text/csv")

def test_download_unknown_attachment(client):
    response = client.get("/attachment", params={"fileId": "nope"})
    assert response.status_code == 404

def test_delete_attachment(client, wiki):
    files = {"Attachment": ("a.txt", b"hello", "text/plain")}
    create_page(client, "files", files=files)
    page = wiki.get_page("files").page
    file_id = page.attachments[0].file_id

    response = client.post(
        "/delete-attachment",
        data={"Id": file_id, "PageId": str(page.id)},
        follow_redirects=False,
    )
    assert response.status_code == 303
    assert response.headers["location"] == "/files"
    assert wiki.get_page("files").page.attachments == []
    assert client.get("/attachment", params={"fileId": file_id}).status_code == 404

def test_delete_attachment_missing_page_id(client):
    response = client.post("/delete-attachment", data={"Id": "x"}, follow_redirects=False)
    assert response.headers["location"] == "/"


# ========== DELETE PAGE ==========
def test_delete_page(client, wiki):
    create_page(client, "temp")
    page = wiki.get_page("temp").page

    response = client.post("/delete-page", data={"Id": str(page.id)}, follow_redirects=False)
    assert response.status_code == 303
    assert response.headers["location"] == "/"
    assert client.get("/temp").json()["editor"] is True
    assert client.get("/pages").json() == []

def test_delete_home_page_is_refused(client, wiki):
    create_page(client, "home-page")
    home = wiki.get_page("home-page").page

    client.post("/delete-page", data={"Id": str(home.id)}, follow_redirects=False)
    assert client.get("/home-page").status_code == 200

def test_delete_page_without_id(client):
    response = client.post("/delete-page", data={}, follow_redirects=False)
    assert response.status_code == 303
    assert response.headers["location"] == "/"


# ========== HEALTH ==========
def test_healthz(client):
    assert client.get("/health/z").json() == {"status": "ok"}

def test_ready(client):
    response = client.get("/health/ready")
    assert response.status_code == 200
    assert response.json() == {"ready": True}

def test_not_ready_when_store_fails(client, wiki, monkeypatch, caplog):
    def broken_ping():
        raise RuntimeError("database is locked")

    monkeypatch.setattr(wiki, "ping", broken_ping)
    with caplog.at_level(logging.WARNING):
        response = client.get("/health/ready")

    assert response.status_code == 503
    assert response.json() == {"ready": False}
    assert "Store not ready: database is locked" in caplog.text
