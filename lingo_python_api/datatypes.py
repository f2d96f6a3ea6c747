"""
Pydantic models describing the resources returned by the Lingo API.

Field names are the client-facing keys produced by `utils.to_client_keys`
(camelCase, `uuid` renamed to `id`). Every model accepts extra fields so
new server attributes are kept rather than rejected.
"""

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class AssetType(str, Enum):
    PNG = "PNG"
    JPG = "JPG"
    GIF = "GIF"
    SVG = "SVG"
    PDF = "PDF"
    EPS = "EPS"
    TIFF = "TIFF"
    Color = "COLOR"
    TextStyle = "TEXT_STYLE"
    # Sketch
    SketchLayer = "SKETCH_LAYER"
    SketchSymbol = "SKETCH_SYMBOL"
    SketchLayerStyle = "SKETCH_LAYER_STYLE"
    SketchTextStyle = "SKETCH_TEXT_STYLE"
    # Documents
    TXT = "TXT"
    DOCX = "DOCX"
    DOTX = "DOTX"
    INDD = "INDD"
    KeynoteTheme = "KEYNOTE_THEME"
    Keynote = "KEYNOTE"
    PagesTemplate = "PAGES_TEMPLATE"
    Pages = "PAGES"
    POTX = "POTX"
    PPTX = "PPTX"
    # Design
    AI = "AI"
    PSD = "PSD"
    # Raster
    HEIC = "HEIC"
    WEBP = "WEBP"
    # Motion
    MOV = "MOV"
    MP4 = "MP4"
    AVI = "AVI"
    LOTTIE = "LOTTIE"
    # Audio
    MP3 = "MP3"
    WAV = "WAV"
    M4A = "M4A"
    # 3D
    STL = "STL"
    OBJ = "OBJ"

    ZIP = "ZIP"
    URL = "URL"


FONT_EXTENSIONS = ("TTF", "OTF", "WOFF", "WOFF2")


class ItemType(str, Enum):
    Asset = "asset"
    Heading = "heading"
    Note = "inline_note"
    CodeSnippet = "code_snippet"
    Guide = "guide"
    Gallery = "gallery"
    # Deprecated, use an asset item with display properties instead
    SupportingContent = "supporting_image"


class LingoModel(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)


# --- Kits ---


class KitVersionCounts(LingoModel):
    assets: Optional[int] = None
    items: Optional[int] = None
    sections: Optional[int] = None


class KitVersion(LingoModel):
    kitId: Optional[str] = None
    status: Optional[str] = None
    version: Optional[int] = None
    versionIdentifier: Optional[str] = None
    notes: Optional[str] = None
    counts: Optional[KitVersionCounts] = None
    dateAdded: Optional[Any] = None
    dateUpdated: Optional[Any] = None


class Kit(LingoModel):
    kitId: Optional[str] = None
    name: Optional[str] = None
    description: Optional[str] = None
    spaceId: Optional[int] = None
    shortId: Optional[str] = None
    useVersion: Optional[int] = None
    status: Optional[str] = None
    privacy: Optional[str] = None
    dateAdded: Optional[Any] = None
    dateUpdated: Optional[Any] = None
    images: Optional[Dict[str, Optional[str]]] = None
    versions: List[KitVersion] = Field(default_factory=list)


class KitOutlineHeading(LingoModel):
    id: Optional[str] = None
    shortId: Optional[str] = None
    displayOrder: Optional[int] = None
    name: Optional[str] = None
    version: Optional[int] = None


class KitOutlineSection(LingoModel):
    id: Optional[str] = None
    shortId: Optional[str] = None
    name: Optional[str] = None
    version: Optional[int] = None
    counts: Optional[KitVersionCounts] = None
    displayOrder: Optional[int] = None
    headers: List[KitOutlineHeading] = Field(default_factory=list)


class KitOutline(KitVersion):
    sections: List[KitOutlineSection] = Field(default_factory=list)


# --- Assets ---


class Color(LingoModel):
    alpha: Optional[float] = None
    brightness: Optional[float] = None
    coverage: Optional[float] = None
    hue: Optional[float] = None
    name: Optional[str] = None
    saturation: Optional[float] = None


class FontMeta(LingoModel):
    displayName: Optional[str] = None
    extension: Optional[str] = None
    family: Optional[str] = None
    fontName: Optional[str] = None
    source: Optional[str] = None
    stylesheetUrl: Optional[str] = None
    variant: Optional[str] = None


class AssetMeta(LingoModel):
    backgroundColor: Optional[str] = None
    font: Optional[FontMeta] = None
    assetProcessing: Optional[str] = None
    content: Optional[Dict[str, Any]] = None
    preview: Optional[Dict[str, Any]] = None
    duration: Optional[float] = None
    filecuts: Optional[Dict[str, Any]] = None


class Asset(LingoModel):
    id: Optional[str] = None
    type: Optional[str] = None
    name: Optional[str] = None
    notes: Optional[str] = None
    dimensions: Optional[str] = None
    size: Optional[int] = None
    meta: Optional[AssetMeta] = None
    keywords: Optional[str] = None
    colors: List[Color] = Field(default_factory=list)
    fileHash: Optional[str] = None
    fileId: Optional[str] = None
    dateAdded: Optional[Any] = None
    dateUpdated: Optional[Any] = None
    fileUpdated: Optional[Any] = None
    permalink: Optional[str] = None
    thumbnails: Optional[Dict[str, Optional[str]]] = None
    fields: Optional[Dict[str, Any]] = None


class DirectLink(LingoModel):
    id: Optional[int] = None
    assetId: Optional[str] = None
    spaceId: Optional[int] = None
    name: Optional[str] = None
    url: Optional[str] = None
    dateAdded: Optional[Any] = None
    dateUpdated: Optional[Any] = None


# --- Items and sections ---


class ItemData(LingoModel):
    content: Optional[str] = None
    codeLanguage: Optional[str] = None
    title: Optional[str] = None
    color: Optional[str] = None
    # Galleries
    dateRefreshed: Optional[Any] = None
    viewName: Optional[str] = None
    name: Optional[str] = None
    viewId: Optional[int] = None
    assets: Optional[int] = None
    itemProcessing: Optional[str] = None


class DisplayProperties(LingoModel):
    size: Optional[int] = None
    imageAlignment: Optional[str] = None
    showMetadata: Optional[bool] = None
    allowDownload: Optional[bool] = None
    caption: Optional[str] = None
    cardBackgroundColor: Optional[str] = None
    autoplay: Optional[bool] = None
    displayStyle: Optional[str] = None


class Item(LingoModel):
    id: Optional[str] = None
    shortId: Optional[str] = None
    kitId: Optional[str] = None
    sectionId: Optional[str] = None
    displayOrder: Optional[int] = None
    version: Optional[int] = None
    status: Optional[str] = None
    type: Optional[str] = None
    dateAdded: Optional[Any] = None
    dateUpdated: Optional[Any] = None
    assetId: Optional[str] = None
    asset: Optional[Asset] = None
    data: Optional[ItemData] = None
    displayProperties: Optional[DisplayProperties] = None


class Section(LingoModel):
    id: Optional[str] = None
    shortId: Optional[str] = None
    name: Optional[str] = None
    kitId: Optional[str] = None
    version: Optional[int] = None
    status: Optional[str] = None
    displayOrder: Optional[int] = None
    counts: Optional[KitVersionCounts] = None
    creatorId: Optional[int] = None
    dateAdded: Optional[Any] = None
    dateUpdated: Optional[Any] = None
    items: List[Item] = Field(default_factory=list)


class UploadResult(LingoModel):
    """Result of creating an asset: either the library asset or the item placing it in a kit."""

    asset: Optional[Asset] = None
    item: Optional[Item] = None


# --- Search and history ---


class SearchResultEntry(LingoModel):
    type: Optional[str] = None
    object: Optional[Dict[str, Any]] = None


class SearchResult(LingoModel):
    total: Optional[int] = None
    offset: Optional[int] = None
    limit: Optional[int] = None
    results: List[SearchResultEntry] = Field(default_factory=list)


class ChangelogUser(LingoModel):
    id: Optional[int] = None
    name: Optional[str] = None
    email: Optional[str] = None


class ChangelogEvent(LingoModel):
    event: Optional[str] = None
    user: Optional[ChangelogUser] = None
    data: Optional[Dict[str, Any]] = None
