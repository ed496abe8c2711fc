REGISTRY_ENTRY_BASE = """
  fragment RegistryEntryBase on RegistryEntry {
    name
    queue {
      address
      config {
        executionDelay
        scheduleDeposit {
          token
          amount
        }
        challengeDeposit {
          token
          amount
        }
        resolver
        rules
      }
    }
    executor {
      address
    }
  }
"""

QUERY_DAOS = """
  query RegistryEntry {
    registryEntries {
      ...RegistryEntryBase
    }
  }
""" + REGISTRY_ENTRY_BASE

QUERY_DAO = """
  query RegistryEntry($name: String!) {
    registryEntries(where: { name: $name }, first: 1) {
      ...RegistryEntryBase
    }
  }
""" + REGISTRY_ENTRY_BASE
