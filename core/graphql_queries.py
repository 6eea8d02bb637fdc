"""
GraphQL Query Definitions — Queries sent to the partner service.

ACADEMIC_PARTNER_QUERY resolves a single academic partner by id. The service
wraps every result in a response envelope:

    {
      "data": {
        "academicPartner": {
          "data": {"id": "ap-1", "name": "Example University", "shortName": "EXU"},
          "errors": [],
          "statusCode": 200
        }
      }
    }

A non-empty "errors" list inside the envelope means the lookup failed for
that id, even when the HTTP status is 200.

Pipeline context:
  Used in Step 4 (partner resolution) by PartnerClient.get_academic_partner().
"""

ACADEMIC_PARTNER_QUERY = """
query AcademicPartner($id: String!) {
  academicPartner(id: $id) {
    data {
      id
      name
      shortName
    }
    errors
    statusCode
  }
}
"""
