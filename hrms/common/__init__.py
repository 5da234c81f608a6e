"""Cross-cutting pieces shared by the domain packages: errors, auth audit, paging, filters."""
