import pytest

from scholar_sync.errors import ProviderUnavailable, RetrievalFailure
from scholar_sync.models import GroundingHit
from scholar_sync.related import RelatedWorkFinder, is_search_page, select_papers, source_label


def hit(url, title="Paper", snippet=None):
    return GroundingHit(url=url, title=title, snippet=snippet)


def test_source_label_strips_leading_www():
    assert source_label("https://www.nature.com/articles/x") == "nature.com"
    assert source_label("https://arxiv.org/abs/1706.03762") == "arxiv.org"
    assert source_label("https://news.www.example.com/a") == "news.www.example.com"


def test_search_pages_are_recognised():
    assert is_search_page("https://www.google.com/search?q=transformers")
    assert is_search_page("https://scholar.google.com/scholar?q=attention")
    assert not is_search_page("https://www.semanticscholar.org/paper/abc")


def test_duplicates_keep_first_seen():
    papers = select_papers(
        [
            hit("https://arxiv.org/abs/1", "First title"),
            hit("https://arxiv.org/abs/1", "Second title"),
            hit("https://arxiv.org/abs/2", "Other"),
        ]
    )
    assert [p.url for p in papers] == ["https://arxiv.org/abs/1", "https://arxiv.org/abs/2"]
    assert papers[0].title == "First title"


def test_capped_at_five_in_discovery_order():
    hits = [hit(f"https://example.org/p{i}", f"P{i}") for i in range(9)]
    papers = select_papers(hits)
    assert len(papers) == 5
    assert [p.title for p in papers] == ["P0", "P1", "P2", "P3", "P4"]


def test_incomplete_and_search_hits_are_dropped():
    papers = select_papers(
        [
            hit("https://www.google.com/search?q=x"),
            GroundingHit(url="https://arxiv.org/abs/3", title=None),
            GroundingHit(url=None, title="No url"),
            hit("https://www.acm.org/doi/10.1/1", "Kept", snippet="because"),
        ]
    )
    assert len(papers) == 1
    assert papers[0].source == "acm.org"
    assert papers[0].snippet == "because"


@pytest.mark.asyncio
async def test_query_uses_title_and_abstract(fake_provider):
    provider = fake_provider(hits=[hit("https://arxiv.org/abs/9")])
    papers = await RelatedWorkFinder(provider).find_related("X", "Y")
    assert '"X"' in provider.searches[0]
    assert '"Y"' in provider.searches[0]
    assert len(papers) == 1


@pytest.mark.asyncio
async def test_no_grounding_is_empty_not_error(fake_provider):
    assert await RelatedWorkFinder(fake_provider(hits=[])).find_related("X", "Y") == []


@pytest.mark.asyncio
async def test_retrieval_failure_is_empty_result(fake_provider):
    provider = fake_provider(search_error=RetrievalFailure("no output"))
    assert await RelatedWorkFinder(provider).find_related("X", "Y") == []


@pytest.mark.asyncio
async def test_provider_outage_propagates(fake_provider):
    provider = fake_provider(search_error=ProviderUnavailable("connection reset"))
    with pytest.raises(ProviderUnavailable):
        await RelatedWorkFinder(provider).find_related("X", "Y")
