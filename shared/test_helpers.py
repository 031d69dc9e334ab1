"""
Test helper functions and factory methods for the Policy Assembly services.
"""

from typing import Dict, Any, Optional, List


class TestDataFactory:
    """Factory for creating test data."""

    __test__ = False

    @staticmethod
    def create_complaints_template(process_clauses: int = 25, governance_clauses: int = 14,
                                   digital_clauses: int = 6, code: str = "COMPLAINTS") -> Dict[str, Any]:
        """Create a Complaints template record with numbered clause ids."""

        def section(section_id: str, title: str, count: int, section_type: str = "policy") -> Dict[str, Any]:
            return {
                "id": section_id,
                "title": title,
                "summary": f"{title} summary",
                "sectionType": section_type,
                "suggestedClauses": [f"complaints-{section_id}-{i}" for i in range(1, count + 1)],
            }

        sections = [
            section("overview", "Overview", 2),
            section("process", "Complaints handling process", process_clauses, "procedure"),
            section("digital", "Digital channels", digital_clauses, "procedure"),
            section("vulnerable", "Vulnerable customers", 2),
            section("fos", "Financial Ombudsman Service", 2, "procedure"),
            section("governance", "Governance & MI", governance_clauses),
        ]
        sections += [
            section(f"appendix-{n}", f"Appendix {n}", 1, "appendix") for n in range(1, 6)
        ]
        return {
            "code": code,
            "name": "Complaints Handling Policy",
            "category": "conduct",
            "sections": sections,
        }

    @staticmethod
    def create_generic_template(code: str = "AML") -> Dict[str, Any]:
        """Create a small template without a hand-written assembler."""
        return {
            "code": code,
            "name": "Anti-Money Laundering Policy",
            "sections": [
                {
                    "id": "purpose",
                    "title": "Purpose",
                    "sectionType": "policy",
                    "suggestedClauses": ["aml_purpose_1", "aml_purpose_2", "aml_purpose_3"],
                },
                {
                    "id": "cdd",
                    "title": "Customer due diligence",
                    "sectionType": "procedure",
                    "suggestedClauses": [
                        "aml_cdd_1", "aml_cdd_2", "aml_cdd_3", "aml_cdd_4", "aml_cdd_5",
                        "aml_edd_domestic_pep",
                    ],
                },
                {
                    "id": "appendix-forms",
                    "title": "Forms",
                    "sectionType": "appendix",
                    "suggestedClauses": ["aml_form_1", "aml_form_2", "aml_form_3"],
                },
            ],
        }

    @staticmethod
    def create_clause(clause_id: str, body_md: Optional[str] = None,
                      title: Optional[str] = None, policy_key: str = "complaints") -> Dict[str, Any]:
        """Create a stored clause record."""
        return {
            "id": clause_id,
            "policy_key": policy_key,
            "title": title or clause_id.replace("-", " ").replace("_", " ").title(),
            "body_md": body_md if body_md is not None else f"{{{{firm.name}}}} applies {clause_id}.",
            "tags": {},
            "variables": [],
            "version": "1.0.0",
            "status": "active",
        }

    @staticmethod
    def create_clause_library(template: Dict[str, Any], extra_ids: Optional[List[str]] = None) -> List[Dict[str, Any]]:
        """Create a clause record for every clause a template lists."""
        ids: List[str] = []
        for section in template["sections"]:
            for clause_id in section["suggestedClauses"]:
                if clause_id not in ids:
                    ids.append(clause_id)
        for clause_id in extra_ids or []:
            if clause_id not in ids:
                ids.append(clause_id)
        return [TestDataFactory.create_clause(clause_id, policy_key=template["code"].lower()) for clause_id in ids]

    @staticmethod
    def create_rule(rule_id: str, condition: Dict[str, Any], action: Optional[Dict[str, Any]] = None,
                    priority: Any = 0, policy_id: str = "policy-1", is_active: bool = True,
                    name: Optional[str] = None) -> Dict[str, Any]:
        """Create an authored rule record."""
        return {
            "id": rule_id,
            "policy_id": policy_id,
            "name": name or f"Rule {rule_id}",
            "condition": condition,
            "action": action or {},
            "priority": priority,
            "is_active": is_active,
            "metadata": {},
        }

    @staticmethod
    def create_firm_profile(firm_id: str = "firm-1", name: str = "Acme Payments Ltd",
                            attributes: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """Create a firm profile with attributes."""
        return {
            "id": firm_id,
            "name": name,
            "attributes": attributes if attributes is not None else {
                "pep_domestic": False,
                "risk_score": 40,
                "firm_size": "small",
            },
        }
