# Routes served by the zencloud file server; update if the server changes.

BASE_URL = "http://localhost:8080"

FILES = {
    "list": {
        "method": "GET",
        "path": "/files",
    },
    "upload": {
        "method": "POST",
        "path": "/upload",
    },
    "download": {
        "method": "GET",
        "path": "/download",
    },
    "delete": {
        "method": "DELETE",
        "path": "/delete",
    },
}
