"""
Ore repository routes
"""

# Version string that asks the repository for its current recommended version
VERSION_RECOMMENDED = "recommended"

PROJECT_LIST = "/api/projects"
PROJECT = "/api/projects/%s"
VERSION_LIST = "/api/projects/%s/versions"
VERSION = "/api/projects/%s/versions/%s"
USER_LIST = "/api/users"
USER = "/api/users/%s"
DOWNLOAD_RECOMMENDED = "/api/projects/%s/versions/recommended/download"
DOWNLOAD = "/api/projects/%s/versions/%s/download"

# Plugin artifacts are always jar archives
ARTIFACT_EXTENSION = ".jar"


def download_route(version: str) -> str:
    """Route to use when downloading the given version"""
    return DOWNLOAD_RECOMMENDED if version == VERSION_RECOMMENDED else DOWNLOAD
