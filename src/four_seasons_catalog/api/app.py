from contextlib import asynccontextmanager
from typing import List, Optional

from fastapi import Body, Depends, FastAPI, HTTPException, Request

from four_seasons_catalog.api.schemas import (
    CompoundCard,
    CompoundDetail,
    DescriptionResponse,
    Developer,
    DeveloperPage,
    Location,
    Post,
    SearchResponse,
    WhatsAppLinkRequest,
    WhatsAppLinkResponse,
)
from four_seasons_catalog.catalog import Catalog
from four_seasons_catalog.log import get_logger
from four_seasons_catalog.search.filters import DEFAULT_PAGE_SIZE, SearchFilters


logger = get_logger("api")

SEARCH_UNAVAILABLE_MESSAGE = (
    "We're having trouble loading the search results. Please try again later."
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    catalog = getattr(app.state, "catalog", None)
    if catalog is not None:
        await catalog.aclose()


app = FastAPI(title="Four Seasons catalog", lifespan=lifespan)


def get_catalog(request: Request) -> Catalog:
    catalog = getattr(request.app.state, "catalog", None)
    if catalog is None:
        catalog = Catalog()
        request.app.state.catalog = catalog
    return catalog


@app.get("/health")
def health():
    return {"status": "ok"}


@app.get("/developers", response_model=List[Developer])
async def developers(catalog: Catalog = Depends(get_catalog)):
    return [d.to_dict() for d in await catalog.developers()]


@app.get("/developers/{slug}", response_model=DeveloperPage)
async def developer_detail(slug: str, catalog: Catalog = Depends(get_catalog)):
    page = await catalog.developer_page(slug)
    if page is None:
        raise HTTPException(status_code=404, detail="developer not found")
    return page.to_dict()


@app.get("/locations", response_model=List[Location])
async def locations(catalog: Catalog = Depends(get_catalog)):
    return [loc.to_dict() for loc in await catalog.locations()]


@app.get("/compounds", response_model=List[CompoundCard])
async def compounds(
    per_page: int = 12,
    page: Optional[int] = None,
    catalog: Catalog = Depends(get_catalog),
):
    return [c.to_dict() for c in await catalog.compound_cards(per_page=per_page, page=page)]


@app.get("/compounds/{slug}", response_model=CompoundDetail)
async def compound_detail(slug: str, catalog: Catalog = Depends(get_catalog)):
    compound = await catalog.compound(slug)
    if compound is None:
        raise HTTPException(status_code=404, detail="compound not found")
    payload = compound.to_dict()
    payload["inquiry_url"] = catalog.compound_inquiry_url(compound.name)
    return payload


@app.get("/search", response_model=SearchResponse)
async def search(
    q: Optional[str] = None,
    location: Optional[str] = None,
    developer: Optional[str] = None,
    page: Optional[str] = None,
    catalog: Catalog = Depends(get_catalog),
):
    filters = SearchFilters.from_params(
        {"q": q, "location": location, "developer": developer, "page": page},
        page_size=DEFAULT_PAGE_SIZE,
    )
    try:
        result, cards = await catalog.search(filters)
    except Exception:
        logger.exception("Error in search results")
        return SearchResponse(page=filters.page, message=SEARCH_UNAVAILABLE_MESSAGE)
    return SearchResponse(
        compounds=[c.to_dict() for c in cards],
        total_matches=result.total_matches,
        total_pages=result.total_pages,
        page=result.page,
        page_size=result.page_size,
        message=SEARCH_UNAVAILABLE_MESSAGE if result.failed else None,
    )


@app.get("/posts", response_model=List[Post])
async def posts(limit: int = 100, catalog: Catalog = Depends(get_catalog)):
    return [p.to_dict() for p in await catalog.posts(limit=limit)]


@app.get("/posts/{slug}", response_model=Post)
async def post_detail(slug: str, catalog: Catalog = Depends(get_catalog)):
    post = await catalog.post(slug)
    if post is None:
        raise HTTPException(status_code=404, detail="post not found")
    return post.to_dict()


@app.post("/sell/description", response_model=DescriptionResponse)
async def sell_description(payload: dict = Body(...), catalog: Catalog = Depends(get_catalog)):
    return await catalog.generate_description(payload)


@app.post("/sell/whatsapp-link", response_model=WhatsAppLinkResponse)
def sell_whatsapp_link(
    payload: WhatsAppLinkRequest, catalog: Catalog = Depends(get_catalog)
):
    return {"url": catalog.sell_property_whatsapp_url(payload.details)}
