"""
Recommendation pipeline.

Responsibilities:
- Run metric evaluation, diet-suggestion acquisition and restaurant
  selection in sequence for one request.
- Isolate each stage so its failure is replaced by a fallback instead of
  aborting the request.
- Assemble the response payload shared by success and error responses.
"""
