"""
Policy Assembly service package.

Builds regulatory policy documents for a firm from a clause library, a
section template and the firm's wizard answers. It provides:

- app.main: API surface for rule test runs, clause tooling, assembly and
  document generation.
- app.rules: Rule model, condition evaluation and the priority-ordered
  firing engine.
- app.clauses: Clause/template records, placeholder extraction and rendering.
- app.assembly: Module-based tiered section assembly.
- app.questions: Wizard question visibility, validation and progress.
- app.documents: End-to-end document generation and audit bundles.

Guidelines:
- The engine is pure and synchronous; the HTTP layer only adapts payloads.
- Data problems degrade to auditable no-ops, never exceptions.
- Keep generation deterministic and observable (metrics + logs).
"""
