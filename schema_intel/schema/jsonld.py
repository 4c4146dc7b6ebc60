"""
Typed JSON-LD nodes for the Schema.org markup we emit.

Each node serializes with its Schema.org property names (aliases) and is
pruned of empty values on output. Documents are assembled with SchemaBuilder,
which picks the variant for the resolved base type.
"""

from typing import List, Dict, Any, Optional, Union
from pydantic import BaseModel, ConfigDict, Field

SCHEMA_CONTEXT = "https://schema.org"

# Keys that carry no information on their own
STRUCTURAL_KEYS = frozenset(["@type", "@context"])


def _is_empty(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return value == ""
    if isinstance(value, list):
        return not value
    if isinstance(value, dict):
        return not (set(value) - STRUCTURAL_KEYS)
    return False


def prune_empty(value: Any) -> Any:
    """
    Recursively drop None, empty strings, empty lists and empty objects.

    An object holding only @type/@context counts as empty. Pruning a pruned
    tree returns it unchanged.
    """
    if isinstance(value, dict):
        pruned = {key: prune_empty(item) for key, item in value.items()}
        return {key: item for key, item in pruned.items() if not _is_empty(item)}
    if isinstance(value, list):
        pruned = [prune_empty(item) for item in value]
        return [item for item in pruned if not _is_empty(item)]
    return value


class JsonLdNode(BaseModel):
    """Common @type/@id/name/description/sameAs properties."""
    model_config = ConfigDict(populate_by_name=True)

    type: Union[str, List[str]] = Field(default="Thing", alias="@type")
    id: Optional[str] = Field(default=None, alias="@id")
    name: Optional[str] = None
    description: Optional[str] = None
    same_as: List[str] = Field(default_factory=list, alias="sameAs")

    def to_jsonld(self) -> Dict[str, Any]:
        return prune_empty(self.model_dump(by_alias=True, exclude_none=True))


class Thing(JsonLdNode):
    pass


class DefinedTerm(JsonLdNode):
    type: str = Field(default="DefinedTerm", alias="@type")


class ImageObject(JsonLdNode):
    type: str = Field(default="ImageObject", alias="@type")
    url: Optional[str] = None
    width: Optional[str] = None
    height: Optional[str] = None


class Organization(JsonLdNode):
    type: str = Field(default="Organization", alias="@type")
    logo: Optional[ImageObject] = None


class Person(JsonLdNode):
    type: str = Field(default="Person", alias="@type")
    job_title: Optional[str] = Field(default=None, alias="jobTitle")
    image: Optional[str] = None
    knows_about: List[str] = Field(default_factory=list, alias="knowsAbout")
    works_for: Optional[Organization] = Field(default=None, alias="worksFor")
    alumni_of: Optional[Organization] = Field(default=None, alias="alumniOf")


class Blog(JsonLdNode):
    type: str = Field(default="Blog", alias="@type")
    publisher: Optional[Organization] = None


class HowToStep(JsonLdNode):
    type: str = Field(default="HowToStep", alias="@type")
    position: int
    text: str


class Article(JsonLdNode):
    """Root document; the other document variants only change @type or add properties."""
    context: str = Field(default=SCHEMA_CONTEXT, alias="@context")
    type: Union[str, List[str]] = Field(default="Article", alias="@type")
    main_entity_of_page: Optional[str] = Field(default=None, alias="mainEntityOfPage")
    headline: Optional[str] = None
    date_published: Optional[str] = Field(default=None, alias="datePublished")
    date_modified: Optional[str] = Field(default=None, alias="dateModified")
    author: Optional[Person] = None
    publisher: Optional[Organization] = None
    image: Optional[ImageObject] = None
    in_language: Optional[str] = Field(default=None, alias="inLanguage")
    keywords: Optional[str] = None
    audience: Dict[str, Any] = Field(default_factory=dict)
    teaches: List[DefinedTerm] = Field(default_factory=list)
    about: List[Thing] = Field(default_factory=list)
    mentions: List[Thing] = Field(default_factory=list)
    article_body: Optional[str] = Field(default=None, alias="articleBody")
    word_count: Optional[int] = Field(default=None, alias="wordCount")
    is_part_of: Optional[Blog] = Field(default=None, alias="isPartOf")

    def to_jsonld(self) -> Dict[str, Any]:
        document = super().to_jsonld()
        # @context leads the serialized document
        return {"@context": document.pop("@context", SCHEMA_CONTEXT), **document}


class BlogPosting(Article):
    type: Union[str, List[str]] = Field(default="BlogPosting", alias="@type")


class Review(Article):
    type: Union[str, List[str]] = Field(default="Review", alias="@type")


class ScholarlyArticle(Article):
    type: Union[str, List[str]] = Field(default="ScholarlyArticle", alias="@type")


class HowTo(Article):
    """A document that is also a HowTo; @type is [<base type>, "HowTo"]."""
    type: Union[str, List[str]] = Field(default_factory=lambda: ["BlogPosting", "HowTo"], alias="@type")
    step: List[HowToStep] = Field(default_factory=list)
    total_time: Optional[str] = Field(default=None, alias="totalTime")


DOCUMENT_TYPES: Dict[str, type] = {
    "Article": Article,
    "BlogPosting": BlogPosting,
    "Review": Review,
    "ScholarlyArticle": ScholarlyArticle,
}


class SchemaBuilder:
    """Accumulates document properties and emits one pruned JSON-LD document."""

    def __init__(self, base_type: str = "Article"):
        if base_type not in DOCUMENT_TYPES:
            raise ValueError(f"Unsupported document type: {base_type}")
        self.base_type = base_type
        self.fields: Dict[str, Any] = {}
        self.howto = False

    def set(self, **fields: Any) -> "SchemaBuilder":
        """Set properties by field name; None values are ignored."""
        self.fields.update({key: value for key, value in fields.items() if value is not None})
        return self

    def as_howto(self, steps: List[HowToStep], total_time: Optional[str] = None) -> "SchemaBuilder":
        self.howto = True
        return self.set(step=steps, total_time=total_time)

    def build_model(self) -> Article:
        if self.howto:
            return HowTo(type=[self.base_type, "HowTo"], **self.fields)
        return DOCUMENT_TYPES[self.base_type](**self.fields)

    def build(self) -> Dict[str, Any]:
        return self.build_model().to_jsonld()
