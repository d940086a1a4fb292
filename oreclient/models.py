"""
Ore Repository Data Models

Pydantic models for the JSON documents returned by the Ore web API. Field
names follow Python conventions; the repository's camelCase keys are mapped
through aliases. Unknown keys are ignored so newer repository versions do not
break older clients.
"""

from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


class OreModel(BaseModel):
    """Common configuration for repository models"""
    model_config = ConfigDict(populate_by_name=True, extra='ignore')

    @model_validator(mode='before')
    @classmethod
    def drop_nulls(cls, data: Any) -> Any:
        # The repository sends null for absent values; let the field defaults apply
        if isinstance(data, dict):
            return {key: value for key, value in data.items() if value is not None}
        return data


class Channel(OreModel):
    """Release channel a version was published to"""
    name: str = ""
    color_hex: str = Field("", alias="color")


class Category(OreModel):
    title: str = ""
    icon: str = ""


class ProjectMember(OreModel):
    user_id: int = Field(0, alias="userId")
    name: str = ""
    roles: List[str] = Field(default_factory=list)
    head_role: str = Field("", alias="headRole")


class Dependency(OreModel):
    """A plugin required by a specific version of another plugin"""
    plugin_id: str = Field(alias="pluginId")
    version: str = ""

    def __str__(self):
        return f"{self.plugin_id} {self.version}"


class Version(OreModel):
    """A published version of a project"""
    id: int = 0
    created_at: str = Field("", alias="createdAt")
    name: str
    dependencies: List[Dependency] = Field(default_factory=list)
    plugin_id: str = Field("", alias="pluginId")
    channel: Optional[Channel] = None
    file_size: int = Field(0, alias="fileSize")

    def find_dependency(self, plugin_id: str) -> Optional[Dependency]:
        """Return the declared dependency on ``plugin_id``, if any"""
        for dependency in self.dependencies:
            if dependency.plugin_id == plugin_id:
                return dependency
        return None


class Project(OreModel):
    """A project (plugin) hosted on the repository"""
    plugin_id: str = Field(alias="pluginId")
    created_at: str = Field("", alias="createdAt")
    name: str = ""
    owner_name: str = Field("", alias="owner")
    description: str = ""
    homepage: str = Field("", alias="href")
    members: List[ProjectMember] = Field(default_factory=list)
    channels: List[Channel] = Field(default_factory=list)
    recommended_version: Optional[Version] = Field(None, alias="recommended")
    category: Optional[Category] = None
    views: int = 0
    downloads: int = 0
    stars: int = 0

    @property
    def recommended_version_name(self) -> Optional[str]:
        if self.recommended_version is None:
            return None
        return self.recommended_version.name

    def __str__(self):
        version = self.recommended_version_name or "?"
        return f"{self.plugin_id} {version} by {self.owner_name}"


class User(OreModel):
    id: int = 0
    created_at: str = Field("", alias="createdAt")
    username: str
    roles: List[str] = Field(default_factory=list)
    starred: List[str] = Field(default_factory=list)
    avatar_url: str = Field("", alias="avatarUrl")
    projects: List[Project] = Field(default_factory=list)
