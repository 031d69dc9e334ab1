"""
Policy Assembly service.
"""

from typing import Dict, Any

from shared.base_service import BaseService
from shared.errors import PolicyEngineException, ServiceError, TemplateNotFoundError, ValidationError
from shared.logging import set_generation_context

from .assembly import DEFAULT_ANSWERS, DetailLevel, assemble_policy
from .assembly.models import AssembleRequest, AssemblyResponse
from .clauses.binder import extract_variables, render_clause
from .clauses.models import (
    ClauseExtractRequest, ClauseExtractResponse, ClauseRenderRequest, ClauseRenderResponse,
    Template,
)
from .documents import generate_document
from .documents.models import GenerateRequest
from .questions import calculate_progress, get_visible_question_codes, validate_answers
from .questions.models import QuestionsValidateRequest, QuestionsValidateResponse
from .questions.visibility import merge_answers_with_firm_profile
from .rules import RuleRunContext, evaluate_rules
from .rules.models import RulesEngineResultResponse, RulesEvaluateRequest


class PolicyService(BaseService):
    """Policy assembly service implementation."""

    def __init__(self):
        super().__init__("policies", 8020)
        self.default_detail_level = DetailLevel.parse(self.config.default_detail_level)
        self._setup_policy_routes()

    def _parse_template(self, data: Dict[str, Any]) -> Template:
        template = Template.from_dict(data)
        if not template.code:
            raise ValidationError("Template code is required")
        if not template.sections:
            raise ValidationError("Template has no sections", {"template_code": template.code})
        return template

    def _setup_policy_routes(self):
        """Set up policy-specific routes."""

        @self.app.get("/")
        async def root():
            """Root endpoint."""
            return {
                "service": "policies",
                "message": "Policy Assembly Service",
                "version": "1.0.0",
                "capabilities": ["rules_engine", "clause_binder", "tiered_assembly", "document_generation"]
            }

        @self.app.post("/rules/evaluate", response_model=RulesEngineResultResponse)
        async def evaluate(request: RulesEvaluateRequest):
            """Run a rule pack against answers and firm attributes."""
            set_generation_context(policy_id=request.policy_id)
            result = evaluate_rules(request.rules, RuleRunContext(
                policy_id=request.policy_id,
                answers=request.answers,
                firm_attributes=request.firm_attributes,
            ))
            self.metrics.record_rules_fired(result.rules_fired)
            return result.to_dict()

        @self.app.post("/clauses/extract", response_model=ClauseExtractResponse)
        async def extract(request: ClauseExtractRequest):
            """Turn bracket placeholders into template tokens and variables."""
            result = extract_variables(request.body, self.config.firm_name_aliases)
            return {
                "body_md": result.body_md,
                "variables": [v.to_dict() for v in result.variables],
            }

        @self.app.post("/clauses/render", response_model=ClauseRenderResponse)
        async def render(request: ClauseRenderRequest):
            """Render a clause template, reporting tokens left unbound."""
            result = render_clause(request.template, request.variables)
            self.metrics.record_unresolved_tokens(len(result.unresolved))
            return {"rendered": result.text, "unresolved": list(result.unresolved)}

        @self.app.post("/questions/validate", response_model=QuestionsValidateResponse)
        async def validate_questions(request: QuestionsValidateRequest):
            """Visible questions, validation errors and progress for wizard answers."""
            answers = merge_answers_with_firm_profile(request.answers, request.firm_attributes)
            visible = get_visible_question_codes(request.questions, answers)
            errors = validate_answers(request.questions, request.answers, visible)
            return {
                "visible_questions": visible,
                "errors": [e.to_dict() for e in errors],
                "progress": calculate_progress(request.questions, request.answers, visible),
            }

        @self.app.post("/policies/assemble", response_model=AssemblyResponse)
        async def assemble(request: AssembleRequest):
            """Assemble a template's sections for a firm's answers."""
            template = self._parse_template(request.template)
            result = assemble_policy(template, request.answers, request.rules_result,
                                     self.default_detail_level)
            self.metrics.record_assembly(template.code)
            return result.to_dict()

        @self.app.post("/policies/generate")
        async def generate(request: GenerateRequest):
            """Generate a rendered policy document and its audit bundle."""
            template = self._parse_template(request.template)
            set_generation_context(firm_id=request.firm_profile.get("id"), policy_id=request.policy.id)

            try:
                with self.metrics.time_operation("policy_generation_duration_seconds", template=template.code):
                    document = generate_document(
                        policy=request.policy.model_dump(),
                        template=template,
                        clauses=request.clauses,
                        rules=request.rules,
                        answers=request.answers,
                        firm_profile=request.firm_profile,
                        questions=request.questions,
                        run_id=request.run_id,
                        generated_by=request.generated_by,
                        metadata=request.metadata,
                        default_detail_level=self.default_detail_level,
                    )
            except PolicyEngineException:
                raise
            except Exception as e:
                self.logger.error("Document generation failed", policy_id=request.policy.id, error=str(e))
                raise ServiceError("Document generation failed", {"policy_id": request.policy.id}) from e

            self.metrics.record_assembly(template.code)
            self.metrics.record_rules_fired(document.audit_bundle.rules_fired)
            self.metrics.record_unresolved_tokens(len(document.unresolved_tokens))
            return document.to_dict()

        @self.app.get("/templates/{template_code}/defaults")
        async def template_defaults(template_code: str):
            """Default wizard answers for a template with a hand-written assembler."""
            defaults = DEFAULT_ANSWERS.get(template_code.upper())
            if defaults is None:
                raise TemplateNotFoundError(template_code)
            return {"template_code": template_code.upper(), "answers": dict(defaults)}


def create_app():
    """Create the FastAPI application."""
    return PolicyService().app


if __name__ == "__main__":
    service = PolicyService()
    service.run()
