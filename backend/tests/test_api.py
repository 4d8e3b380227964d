import json

from app.models.quotation import PricingConfig, Quotation
from app.services.pricing import PriceEngine
from app.services.settings import PricingSettings
from app.services.validation import MALFORMED_INPUT

STANDARD_PAGE = {"id": 1, "name": "Home", "tier": "standard", "isLongPage": True,
                 "animations": 2, "apiIntegrations": 1, "reusedComponents": 1}


def test_root(client):
    assert client.get("/").json()["status"] == "ok"


class TestPricingRoutes:
    def test_get_defaults(self, client, pricing_dict):
        assert client.get("/pricing/").json() == pricing_dict

    def test_put_valid_config(self, client, pricing_dict):
        pricing_dict["tiers"]["simple"] = 1100
        resp = client.put("/pricing/", content=json.dumps(pricing_dict))
        assert resp.status_code == 200
        assert client.get("/pricing/").json()["tiers"]["simple"] == 1100

    def test_put_missing_section(self, client, pricing_dict):
        del pricing_dict["optional_features"]
        resp = client.put("/pricing/", content=json.dumps(pricing_dict))
        assert resp.status_code == 422
        assert resp.json() == {"errors": ["Missing required section: optional_features"]}
        assert "optional_features" in client.get("/pricing/").json()

    def test_put_malformed(self, client):
        before = client.get("/pricing/").json()
        resp = client.put("/pricing/", content="{ tiers: ")
        assert resp.status_code == 422
        assert resp.json() == {"errors": [MALFORMED_INPUT]}
        assert client.get("/pricing/").json() == before

    def test_put_non_finite_extra_entry(self, client, pricing_dict):
        before = client.get("/pricing/").json()
        pricing_dict["tiers"]["premium"] = float("nan")
        resp = client.put("/pricing/", content=json.dumps(pricing_dict))
        assert resp.status_code == 422
        assert resp.json() == {"errors": ["Invalid value in tiers: premium"]}
        assert client.get("/pricing/").json() == before

    def test_validate_is_dry_run(self, client, pricing_dict):
        pricing_dict["tiers"]["simple"] = -5
        resp = client.post("/pricing/validate", content=json.dumps(pricing_dict))
        assert resp.json() == {"valid": False, "errors": ["Invalid value for tier: simple"]}
        assert client.get("/pricing/").json()["tiers"]["simple"] == 1000

    def test_reset(self, client, pricing_dict):
        pricing_dict["tiers"]["advanced"] = 1
        client.put("/pricing/", content=json.dumps(pricing_dict))
        assert client.post("/pricing/reset").json()["pricing"]["tiers"]["advanced"] == 5000

    def test_export(self, client, pricing_dict):
        resp = client.get("/pricing/export")
        assert resp.headers["content-disposition"].startswith('attachment; filename="pricing_config_')
        assert resp.json() == pricing_dict


class TestQuotationRoutes:
    def test_resize(self, client):
        resp = client.post("/quotations/pages/resize", json={"pages": [STANDARD_PAGE], "count": 3})
        pages = resp.json()["pages"]
        assert [p["id"] for p in pages] == [1, 2, 3]
        assert pages[0] == STANDARD_PAGE
        assert pages[2]["name"] == "Page 3"

    def test_estimate(self, client):
        resp = client.post("/quotations/estimate", json={"pages": [STANDARD_PAGE, dict(STANDARD_PAGE, id=2)],
                                                         "optionalFeatures": {"seo_optimization": True}})
        assert resp.json()["total"] == 9900

    def test_unknown_feature_rejected(self, client):
        resp = client.post("/quotations/estimate", json={"pages": [STANDARD_PAGE],
                                                         "optionalFeatures": {"blockchain": True}})
        assert resp.status_code == 422

    def test_unknown_tier_is_422(self, client):
        resp = client.post("/quotations/estimate", json={"pages": [dict(STANDARD_PAGE, tier="enterprise")]})
        assert resp.status_code == 422
        assert resp.json()["detail"][0]["loc"][-1] == "tier"

    def test_config_key_missing_is_422(self, client, pricing_dict):
        del pricing_dict["modifiers"]["api"]
        client.app.state.pricing = PricingSettings(PricingConfig.model_validate(pricing_dict))
        resp = client.post("/quotations/estimate", json={"pages": [STANDARD_PAGE]})
        assert resp.status_code == 422
        assert (resp.json()["section"], resp.json()["key"]) == ("modifiers", "api")

    def test_current_before_any_save(self, client):
        resp = client.get("/quotations/current")
        assert resp.status_code == 404
        assert "Create a new quotation" in resp.json()["detail"]

    def test_current_html_empty_state(self, client):
        resp = client.get("/quotations/current", headers={"accept": "text/html"})
        assert resp.status_code == 200
        assert "No Quotation Found" in resp.text

    def test_create_and_fetch(self, client):
        resp = client.post("/quotations/", json={"pages": [STANDARD_PAGE],
                                                 "optionalFeatures": {"cms_support": True}})
        assert resp.status_code == 201
        created = resp.json()
        assert created["source"] == "manual"
        assert created["totalPrice"] == 6200

        current = client.get("/quotations/current").json()
        assert current == created
        q = Quotation.model_validate(current)
        assert q.total_price == PriceEngine().quotation_total(q.pages, q.optional_features, q.pricing)

    def test_config_change_does_not_touch_saved_quote(self, client, pricing_dict):
        client.post("/quotations/", json={"pages": [STANDARD_PAGE]})
        pricing_dict["tiers"]["standard"] = 10000
        client.put("/pricing/", content=json.dumps(pricing_dict))
        current = client.get("/quotations/current").json()
        assert current["pricing"]["tiers"]["standard"] == 2500
        assert current["totalPrice"] == 4200

    def test_exports(self, client):
        client.post("/quotations/", json={"pages": [STANDARD_PAGE]})
        as_json = client.get("/quotations/current/export.json")
        assert as_json.json() == client.get("/quotations/current").json()
        assert 'filename="quotation_' in as_json.headers["content-disposition"]

        as_pdf = client.get("/quotations/current/export.pdf")
        assert as_pdf.headers["content-type"] == "application/pdf"
        assert as_pdf.content.startswith(b"%PDF")

    def test_export_without_quotation(self, client):
        assert client.get("/quotations/current/export.pdf").status_code == 404


class TestAnalysisRoutes:
    def test_requires_input(self, client):
        assert client.post("/analysis/", data={}).status_code == 400

    def test_url_analysis(self, client):
        resp = client.post("/analysis/", data={"figma_url": "https://figma.com/file/abc"})
        candidates = resp.json()["candidates"]
        assert [c["name"] for c in candidates] == ["Homepage", "About Us", "Services", "Contact"]

    def test_file_analysis(self, client):
        resp = client.post("/analysis/", files={"file": ("site.fig", b"binary", "application/octet-stream")})
        assert len(resp.json()["candidates"]) == 4

    def test_quotation_from_analysis(self, client):
        candidates = client.post("/analysis/", data={"figma_url": "https://figma.com/file/abc"}).json()["candidates"]
        resp = client.post("/analysis/quotation", json={"candidates": candidates})
        assert resp.status_code == 201
        doc = resp.json()
        assert doc["source"] == "figma_analysis"
        assert all(p["reusedComponents"] == 0 for p in doc["pages"])
        # 5000+800+900+1000, 2500+800+300, 2500+600, 1000+500
        assert doc["totalPrice"] == 7700 + 3600 + 3100 + 1500

        html = client.get("/quotations/current", headers={"accept": "text/html"}).text
        assert "Generated from Figma analysis" in html
