import json
from typing import List, Dict, Union, Any, Optional, Literal
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_wire(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True)


# --- Template analysis ---

LayoutType = Literal["title", "content", "two-column", "basic"]


class LayoutInfo(CamelModel):
    name: str
    type: LayoutType


class PartInfo(CamelModel):
    name: str
    path: str


class ImageInfo(CamelModel):
    name: str
    path: str
    type: str


class ColorScheme(CamelModel):
    primary: str = "#1f497d"
    secondary: str = "#4f81bd"
    accent: str = "#9cbb58"
    background: str = "#ffffff"


class FontScheme(CamelModel):
    major_font: str = "Calibri"
    minor_font: str = "Calibri"
    major_variants: Dict[str, str] = Field(default_factory=dict)
    minor_variants: Dict[str, str] = Field(default_factory=dict)


class ThemeInfo(CamelModel):
    color_scheme: ColorScheme = Field(default_factory=ColorScheme)
    font_scheme: FontScheme = Field(default_factory=FontScheme)
    colors: Dict[str, str] = Field(default_factory=dict)


class TemplateAnalysis(CamelModel):
    model_config = ConfigDict(frozen=True)

    layouts: List[LayoutInfo] = Field(default_factory=list, alias="slideLayouts")
    master_slides: List[PartInfo] = Field(default_factory=list)
    theme: ThemeInfo = Field(default_factory=ThemeInfo)
    images: List[ImageInfo] = Field(default_factory=list)
    metadata: Dict[str, Any] = Field(default_factory=dict)


# --- Planner output ---

class ContentAnalysis(CamelModel):
    title: str = ""
    themes: List[str] = Field(default_factory=list)
    key_points: Dict[str, List[str]] = Field(default_factory=dict)
    data_points: List[str] = Field(default_factory=list)
    slide_count: int = 0
    structure: str = ""
    conclusion: str = ""

    @field_validator("title", mode="before")
    @classmethod
    def _none_to_empty(cls, v):
        return "" if v is None else str(v)

    @field_validator("slide_count", mode="before")
    @classmethod
    def _missing_count(cls, v):
        return 0 if v in (None, "") else v

    @field_validator("themes", mode="before")
    @classmethod
    def _cap_themes(cls, v):
        if v is None:
            return []
        return [str(t) for t in v][:5]

    @field_validator("key_points", mode="before")
    @classmethod
    def _normalize_key_points(cls, v):
        if not v:
            return {}
        if isinstance(v, list):
            # Some models return a flat list of points instead of a mapping
            return {"general": [str(p) for p in v]}
        return {str(k): ([str(p) for p in points] if isinstance(points, list) else [str(points)])
                for k, points in v.items()}

    @field_validator("data_points", mode="before")
    @classmethod
    def _stringify_data_points(cls, v):
        if not v:
            return []
        return [p if isinstance(p, str) else str(p) for p in v]

    @field_validator("structure", "conclusion", mode="before")
    @classmethod
    def _free_text(cls, v):
        if v is None:
            return ""
        if isinstance(v, (dict, list)):
            return json.dumps(v, ensure_ascii=False)
        return str(v)


SlideType = Literal["title", "content", "comparison", "conclusion"]


class Slide(CamelModel):
    slide_number: int = 0
    type: SlideType = "content"
    title: str = ""
    content: Union[List[str], str] = Field(default_factory=list)
    notes: str = ""

    @model_validator(mode="before")
    @classmethod
    def _unwrap_outline_content(cls, data):
        # Planners may return content as {"mainPoints": [...], "subPoints": [...], "notes": "..."}
        if isinstance(data, dict) and isinstance(data.get("content"), dict):
            data = dict(data)
            nested = data["content"]
            data["content"] = nested.get("mainPoints") or []
            if not data.get("notes") and nested.get("notes"):
                data["notes"] = nested["notes"]
        return data

    @field_validator("type", mode="before")
    @classmethod
    def _coerce_type(cls, v):
        v = str(v or "").strip().lower()
        return v if v in ("title", "content", "comparison", "conclusion") else "content"

    @field_validator("slide_number", mode="before")
    @classmethod
    def _missing_number(cls, v):
        return 0 if v in (None, "") else v

    @field_validator("title", "notes", mode="before")
    @classmethod
    def _none_to_empty(cls, v):
        return "" if v is None else str(v)

    @field_validator("content", mode="before")
    @classmethod
    def _normalize_content(cls, v):
        if v is None:
            return []
        if isinstance(v, list):
            return [p if isinstance(p, str) else str(p) for p in v]
        return v


class SlideStructure(CamelModel):
    total_slides: int = 0
    slides: List[Slide] = Field(default_factory=list)


# --- Provider configuration ---

class ProviderConfig(BaseModel):
    provider: str
    api_key: str
    model: Optional[str] = None
