"""RecommendationService 集成测试。

测试覆盖:
- 完整流程（profiler -> filter -> scorer -> generative -> aggregator）
- 生成式推荐失败/超时时的降级
- 空目录、无效请求
- CatalogProvider 与 persister
"""

import pytest

from giftrec.models import (
    BudgetRange,
    CandidateSource,
    IntimacyLevel,
    Product,
    Recipient,
)
from giftrec.services.catalog_service import CatalogError, CatalogProvider, InMemoryCatalogProvider
from giftrec.services.hybrid_aggregator import FALLBACK_WARNING
from giftrec.services.llm_service import LLMServiceError
from giftrec.services.recommendation_service import (
    EMPTY_CATALOG_WARNING,
    GENERATIVE_UNAVAILABLE_WARNING,
    InvalidRecommendationRequest,
    RecommendationPersister,
    RecommendationRequest,
    RecommendationService,
    RecommendationServiceError,
)

from conftest import shortlist_json


@pytest.fixture
def home_catalog() -> list[Product]:
    """价格 20/45/80/150/300 的家居商品（无兴趣标签）。"""
    return [
        Product(id="p1", name="Scented Candle", price=20, category="home"),
        Product(id="p2", name="Ceramic Mug", price=45, category="home"),
        Product(id="p3", name="Linen Throw", price=80, category="home"),
        Product(id="p4", name="Table Lamp", price=150, category="home"),
        Product(id="p5", name="Armchair", price=300, category="home"),
    ]


class RecordingPersister(RecommendationPersister):
    """记录保存调用的 persister。"""

    def __init__(self, fail: bool = False):
        self.saved = []
        self.fail = fail

    def save(self, recipient, recommendations):
        if self.fail:
            raise IOError("disk full")
        self.saved.append((recipient, recommendations))


class BrokenCatalogProvider(CatalogProvider):
    def get_catalog(self):
        raise CatalogError("catalog service down")


def _ids(result) -> list[str]:
    return [r.product_id for r in result.recommendations]


class TestContentOnlyRanking:
    """测试仅基于内容的排序（生成式关闭或失败）。"""

    def test_sister_ranks_by_price_fit(self, sample_recipient, home_catalog, mock_llm):
        """测试预算 $30-$150 内按与中点 $90 的距离排序。"""
        service = RecommendationService(use_generative=False, llm_service=mock_llm)

        result = service.recommend(RecommendationRequest(recipient=sample_recipient, catalog=home_catalog))

        assert _ids(result) == ["p3", "p2", "p4"]
        assert result.warnings == []
        assert result.profile.relationship == "sibling"
        assert mock_llm.call_count == 0

    def test_generative_failure_degrades_with_warning(self, sample_recipient, home_catalog, mock_llm):
        """测试生成式失败时仍返回内容结果并附加警告。"""
        mock_llm.should_fail = True
        mock_llm.max_failures = 999
        service = RecommendationService(llm_service=mock_llm)

        result = service.recommend(RecommendationRequest(recipient=sample_recipient, catalog=home_catalog))

        assert _ids(result) == ["p3", "p2", "p4"]
        assert result.warnings == [GENERATIVE_UNAVAILABLE_WARNING]
        assert mock_llm.call_count == 2

    def test_generative_timeout_returns_non_empty(self, sample_recipient, sample_catalog, mock_llm):
        """测试模拟超时时返回非空结果和警告。"""
        mock_llm.should_fail = True
        mock_llm.max_failures = 999
        mock_llm.error = LLMServiceError("request timed out", retryable=True)
        service = RecommendationService(llm_service=mock_llm)

        result = service.recommend(RecommendationRequest(recipient=sample_recipient, catalog=sample_catalog))

        assert result.recommendations
        assert GENERATIVE_UNAVAILABLE_WARNING in result.warnings
        assert all(r.sources == (CandidateSource.CONTENT,) for r in result.recommendations)


    def test_overflowing_model_price_degrades(self, sample_recipient, home_catalog, mock_llm):
        """测试模型返回 1e999 价格时整个流程不中断，退回内容结果。"""
        mock_llm.response = (
            '{"items": [{"name": "Ceramic Mug", "approximatePrice": 1e999,'
            ' "category": "home", "justification": "x"}]}'
        )
        service = RecommendationService(llm_service=mock_llm)

        result = service.recommend(RecommendationRequest(recipient=sample_recipient, catalog=home_catalog))

        assert _ids(result) == ["p3", "p2", "p4"]
        assert result.warnings == [GENERATIVE_UNAVAILABLE_WARNING]


class TestHybridRanking:
    """测试内容和生成式结果的合并。"""

    def test_generative_pick_is_boosted(self, sample_recipient, home_catalog, mock_llm):
        """测试生成式推荐的商品被提升并使用模型理由。"""
        mock_llm.response = shortlist_json(("Ceramic Mug", 45, "home", "She collects handmade mugs."))
        service = RecommendationService(llm_service=mock_llm)

        result = service.recommend(RecommendationRequest(recipient=sample_recipient, catalog=home_catalog))

        assert _ids(result) == ["p2", "p3", "p4"]
        top = result.recommendations[0]
        assert top.reasoning == "She collects handmade mugs."
        assert top.sources == (CandidateSource.CONTENT, CandidateSource.GENERATIVE)
        assert top.score == 1.0
        assert result.warnings == []

    def test_generative_sees_only_in_budget_products(self, sample_recipient, home_catalog, mock_llm):
        service = RecommendationService(llm_service=mock_llm)

        service.recommend(RecommendationRequest(recipient=sample_recipient, catalog=home_catalog))

        prompt = mock_llm.prompts[0]
        assert "Ceramic Mug" in prompt
        assert "Armchair" not in prompt
        assert "Scented Candle" not in prompt

    def test_generative_respects_formality_exclusions(self, mock_llm):
        """测试正式关系下生成式来源也不会带入恶搞礼物。"""
        catalog = [
            Product(id="joke", name="Joke Mug", price=40, category="gag_gift"),
            Product(id="tea", name="Tea Tin", price=40, category="food_beverage"),
        ]
        mock_llm.response = shortlist_json(("Joke Mug", 40, "gag_gift", "Everyone loves a laugh."))
        boss = Recipient(id="b", name="Dana", relationship="boss")
        service = RecommendationService(llm_service=mock_llm)

        result = service.recommend(RecommendationRequest(recipient=boss, catalog=catalog))

        assert _ids(result) == ["tea"]
        assert "Joke Mug" not in mock_llm.prompts[0]

    def test_no_duplicates_and_limit(self, sample_recipient, sample_catalog, mock_llm_with_gifts):
        """测试结果无重复且不超过上限。"""
        service = RecommendationService(llm_service=mock_llm_with_gifts)

        result = service.recommend(
            RecommendationRequest(recipient=sample_recipient, catalog=sample_catalog, result_limit=3)
        )

        ids = _ids(result)
        assert len(ids) == len(set(ids))
        assert 0 < len(ids) <= 3

    def test_all_results_within_budget(self, sample_recipient, sample_catalog, mock_llm_with_gifts):
        service = RecommendationService(llm_service=mock_llm_with_gifts)

        result = service.recommend(RecommendationRequest(recipient=sample_recipient, catalog=sample_catalog))

        budget = result.profile.suggested_budget_range
        assert all(budget.contains(r.product.price) for r in result.recommendations)
        assert all(r.reasoning for r in result.recommendations)

    def test_deterministic(self, sample_recipient, sample_catalog, mock_llm_with_gifts):
        """测试相同输入得到相同排序。"""
        service = RecommendationService(llm_service=mock_llm_with_gifts)
        request = RecommendationRequest(recipient=sample_recipient, catalog=sample_catalog, occasion="birthday")

        assert service.recommend(request).recommendations == service.recommend(request).recommendations


class TestEdgeCases:
    """测试边界情况。"""

    def test_empty_catalog(self, sample_recipient, mock_llm):
        """测试空目录返回空列表和警告，不调用 LLM。"""
        service = RecommendationService(llm_service=mock_llm)

        result = service.recommend(RecommendationRequest(recipient=sample_recipient, catalog=[]))

        assert result.recommendations == []
        assert result.warnings == [EMPTY_CATALOG_WARNING]
        assert mock_llm.call_count == 0

    def test_nothing_in_budget_uses_fallback(self, sample_recipient, mock_llm):
        """测试预算内没有商品时返回价格最接近的商品和警告。"""
        catalog = [
            Product(id="a", name="Yacht", price=9000, category="travel"),
            Product(id="b", name="Sticker", price=2, category="stationery"),
        ]
        service = RecommendationService(use_generative=False, llm_service=mock_llm)

        result = service.recommend(RecommendationRequest(recipient=sample_recipient, catalog=catalog))

        assert _ids(result) == ["b", "a"]
        assert FALLBACK_WARNING in result.warnings

    def test_unknown_relationship_still_recommends(self, minimal_recipient, sample_catalog, mock_llm):
        service = RecommendationService(use_generative=False, llm_service=mock_llm)

        result = service.recommend(RecommendationRequest(recipient=minimal_recipient, catalog=sample_catalog))

        assert result.profile.is_default
        assert result.recommendations

    def test_closeness_and_budget_override_passed_through(self, sample_recipient, sample_catalog, mock_llm):
        service = RecommendationService(use_generative=False, llm_service=mock_llm)

        result = service.recommend(RecommendationRequest(
            recipient=sample_recipient,
            catalog=sample_catalog,
            closeness="distant",
            budget_override={"min": 10, "max": 500},
        ))

        assert result.profile.intimacy_level is IntimacyLevel.DISTANT
        assert result.profile.suggested_budget_range == BudgetRange(minimum=10, maximum=500)

    def test_recipient_dict_accepted(self, sample_catalog, mock_llm):
        service = RecommendationService(use_generative=False, llm_service=mock_llm)

        result = service.recommend(RecommendationRequest(
            recipient={"id": 9, "name": "Ana", "relationship": "Friend", "notes": "tea and books"},
            catalog=sample_catalog,
        ))

        assert result.profile.relationship == "friend"


class TestInvalidRequests:
    """测试无效请求在评分前被拒绝。"""

    @pytest.mark.parametrize("recipient", [
        None,
        Recipient(id="r", name="No Relationship", relationship="  "),
        Recipient(id="", name="No Id", relationship="friend"),
        {"name": "Dict Without Id", "relationship": "friend"},
    ])
    def test_invalid_recipient(self, recipient, sample_catalog, mock_llm):
        service = RecommendationService(llm_service=mock_llm)

        with pytest.raises(InvalidRecommendationRequest):
            service.recommend(RecommendationRequest(recipient=recipient, catalog=sample_catalog))
        assert mock_llm.call_count == 0

    def test_invalid_budget_override(self, sample_recipient, sample_catalog):
        with pytest.raises(InvalidRecommendationRequest):
            RecommendationService(use_generative=False).recommend(RecommendationRequest(
                recipient=sample_recipient, catalog=sample_catalog, budget_override={"min": 100, "max": 10},
            ))

    def test_invalid_result_limit(self, sample_recipient, sample_catalog):
        with pytest.raises(InvalidRecommendationRequest):
            RecommendationService(use_generative=False).recommend(
                RecommendationRequest(recipient=sample_recipient, catalog=sample_catalog, result_limit=0)
            )

    def test_invalid_closeness(self, sample_recipient, sample_catalog):
        with pytest.raises(InvalidRecommendationRequest):
            RecommendationService(use_generative=False).recommend(
                RecommendationRequest(recipient=sample_recipient, catalog=sample_catalog, closeness="soulmates")
            )

    def test_missing_catalog_without_provider(self, sample_recipient):
        with pytest.raises(InvalidRecommendationRequest):
            RecommendationService(use_generative=False).recommend(RecommendationRequest(recipient=sample_recipient))


class TestCollaborators:
    """测试 CatalogProvider 与 persister。"""

    def test_catalog_provider_used_when_no_catalog(self, sample_recipient, sample_catalog):
        service = RecommendationService(
            use_generative=False, catalog_provider=InMemoryCatalogProvider(sample_catalog),
        )

        result = service.recommend(RecommendationRequest(recipient=sample_recipient))

        assert result.recommendations

    def test_catalog_provider_failure(self, sample_recipient):
        service = RecommendationService(use_generative=False, catalog_provider=BrokenCatalogProvider())

        with pytest.raises(RecommendationServiceError):
            service.recommend(RecommendationRequest(recipient=sample_recipient))

    def test_persister_receives_final_list(self, sample_recipient, sample_catalog):
        persister = RecordingPersister()
        service = RecommendationService(use_generative=False, persister=persister)

        result = service.recommend(RecommendationRequest(recipient=sample_recipient, catalog=sample_catalog))

        assert persister.saved == [(sample_recipient, result.recommendations)]

    def test_persister_failure_raises(self, sample_recipient, sample_catalog):
        service = RecommendationService(use_generative=False, persister=RecordingPersister(fail=True))

        with pytest.raises(RecommendationServiceError):
            service.recommend(RecommendationRequest(recipient=sample_recipient, catalog=sample_catalog))
