from typing import Dict
from fastapi import FastAPI, Query, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import httpx
from loguru import logger
import uvicorn

from listing_stats import config
from listing_stats.logging_config import setup_default_logging
from listing_stats.records import extract_listings, merge_results, parse_page_count
from listing_stats.schemas import AggregateSummary, ExtractRequest, ExtractResponse, SummaryRequest
from listing_stats.scrapers.otodom import is_supported_url, page_url
from listing_stats.snapshot import write_snapshot
from listing_stats.stats import aggregate
from listing_stats.utils.http import Http

setup_default_logging()

app = FastAPI(title="Listing price statistics", version="0.1.0")
app.add_middleware(CORSMiddleware, allow_origins=["*"], allow_methods=["*"], allow_headers=["*"])


def _respond(result) -> ExtractResponse:
    return ExtractResponse(**result.model_dump(), summary=aggregate(result.listings))


@app.get("/health")
async def health():
    return {"status": "ok"}


@app.post("/extract", response_model=ExtractResponse)
async def extract(req: ExtractRequest):
    return _respond(extract_listings(req.html, req.category))


@app.post("/summary", response_model=Dict[str, AggregateSummary])
async def summary(req: SummaryRequest):
    return aggregate(req.listings)


@app.get("/scrape", response_model=ExtractResponse)
async def scrape(
    url: str = Query(...),
    category: str = Query(..., description="district/room bucket"),
    pages: int = Query(1, ge=1, le=config.MAX_PAGES, description="result pages to walk"),
    save: bool = Query(False, description="write a JSON snapshot to RESULTS_DIR"),
):
    if not is_supported_url(url):
        raise HTTPException(status_code=400, detail="Unsupported domain")

    http = Http()
    try:
        html = await http.get_text(url)
        results = [extract_listings(html, category, base_url=url)]
        last = min(pages, parse_page_count(html))
        for n in range(2, last + 1):
            next_url = page_url(url, n)
            results.append(extract_listings(await http.get_text(next_url), category, base_url=next_url))
    finally:
        await http.close()

    result = merge_results(*results)
    resp = _respond(result)
    if save:
        write_snapshot(result, resp.summary, source_url=url)
    return resp


@app.exception_handler(httpx.HTTPError)
async def upstream_error_handler(request: Request, exc: httpx.HTTPError):
    logger.error(f"Upstream fetch failed for {request.url}: {exc}")
    return JSONResponse(
        status_code=502,
        content={"detail": "Listing site could not be fetched. Please retry later."},
    )


if __name__ == "__main__":
    uvicorn.run(app, host=config.API_HOST, port=config.API_PORT)
