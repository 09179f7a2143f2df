BINARY_EXTENSIONS = {
    ".png",
    ".jpg",
    ".jpeg",
    ".gif",
    ".ico",
    ".pdf",
    ".zip",
    ".dll",
    ".exe",
    ".woff",
    ".woff2",
    ".ttf",
    ".svg",
}


def is_binary_path(file_name: str) -> bool:
    return any(file_name.lower().endswith(ext) for ext in BINARY_EXTENSIONS)
