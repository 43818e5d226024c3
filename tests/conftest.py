"""测试配置和共享 Fixtures。"""

import json

import pytest

from giftrec.models import BudgetRange, Product, Recipient


# ============================================================================
# Mock Services
# ============================================================================

class MockLLMService:
    """测试用 Mock LLM 服务。

    可以通过设置 response 属性来控制返回值。
    可以通过设置 should_fail / max_failures 来模拟前 N 次调用失败。
    可以通过设置 error 来指定抛出的异常。
    """

    def __init__(self):
        self.response = '{"items": []}'
        self.should_fail = False
        self.fail_count = 0
        self.max_failures = 0
        self.call_count = 0
        self.error: Exception | None = None
        self.prompts: list[str] = []
        self.timeouts: list[float | None] = []

    def call(self, prompt: str, *, json_mode: bool = False, timeout: float | None = None) -> str:
        self.call_count += 1
        self.prompts.append(prompt)
        self.timeouts.append(timeout)

        if self.should_fail:
            if self.fail_count < self.max_failures:
                self.fail_count += 1
                raise self.error or Exception("Mock LLM failure")

        return self.response

    def reset(self):
        """重置状态。"""
        self.call_count = 0
        self.fail_count = 0
        self.prompts = []
        self.timeouts = []


def shortlist_json(*items: tuple[str, float, str, str]) -> str:
    """构造模型返回的 shortlist JSON。"""
    return json.dumps({
        "items": [
            {"name": n, "approximatePrice": p, "category": c, "justification": j}
            for n, p, c, j in items
        ]
    })


# ============================================================================
# Model Fixtures
# ============================================================================

@pytest.fixture
def sample_recipient() -> Recipient:
    """创建示例 Recipient（姐妹，喜欢瑜伽和咖啡）。"""
    return Recipient(
        id="r-1",
        name="Maya",
        relationship="sister",
        age=31,
        gender="female",
        notes="Loves yoga on weekends and can't start the day without good coffee.",
    )


@pytest.fixture
def minimal_recipient() -> Recipient:
    """创建最小化 Recipient（用于边界测试）。"""
    return Recipient(id="r-2", name="Sam", relationship="mystery person")


@pytest.fixture
def sample_catalog() -> list[Product]:
    """创建示例商品目录。"""
    return [
        Product(id="p01", name="Cork Yoga Mat", price="68.00", category="wellness",
                tags={"wellness", "fitness"}, occasions={"birthday"}),
        Product(id="p02", name="Pour-Over Coffee Set", price="54.00", category="food_beverage",
                tags={"food_beverage"}, moods={"cozy"}),
        Product(id="p03", name="Whoopee Cushion", price="12.00", category="gag_gift",
                tags={"humor"}),
        Product(id="p04", name="Leather Notebook", price="35.00", category="stationery",
                tags={"office"}),
        Product(id="p05", name="Designer Handbag", price="450.00", category="luxury",
                tags={"fashion"}),
        Product(id="p06", name="Aromatherapy Diffuser", price="42.00", category="home",
                tags={"wellness", "home"}, moods={"relaxing"}),
        Product(id="p07", name="Wireless Earbuds", price="120.00", category="tech",
                tags={"tech", "music"}),
        Product(id="p08", name="Single-Origin Coffee Sampler", price="31.00", category="food_beverage",
                tags={"food_beverage"}),
    ]


@pytest.fixture
def sister_budget() -> BudgetRange:
    """sibling 关系的默认预算。"""
    return BudgetRange(minimum=30, maximum=150)


# ============================================================================
# Service Fixtures
# ============================================================================

@pytest.fixture
def mock_llm() -> MockLLMService:
    """创建 Mock LLM 服务。"""
    return MockLLMService()


@pytest.fixture
def mock_llm_with_gifts(mock_llm: MockLLMService) -> MockLLMService:
    """创建返回礼物 shortlist 的 Mock LLM。"""
    mock_llm.response = shortlist_json(
        ("Pour Over Coffee Set", 55, "food_beverage", "She starts every morning with coffee."),
        ("Cork Yoga Mat", 70, "wellness", "A sturdy mat for her weekend yoga."),
        ("Moon Landing Replica", 90, "novelty", "Invented item that is not in the catalog."),
    )
    return mock_llm
