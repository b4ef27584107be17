"""
Scan Services

One scan flows through these in order:

1. rendering/ - Browser automation
   - page_renderer.py: headless Chrome session, navigation, network-idle wait

2. evaluation/ - Rule engine
   - axe_evaluator.py: injects axe-core into the page and runs the WCAG 2 A/AA rules

3. report/ - Result shaping
   - builder.py: raw axe results -> immutable Report
   - remediation.py: rule advice and impact explanations

4. storage/ - Report lookup
   - report_store.py: in-memory reports keyed by id

5. scan/ - Orchestration
   - scan.py: ScanService ties the stages together
"""
