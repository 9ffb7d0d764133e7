try:
    from google.adk.agents import Agent
except ImportError:
    # Compatibility with older ADK versions
    from google.adk.agents.llm_agent import Agent


def list_test_cases() -> dict:
    """ADK tool: return the names and descriptions of the picker scenarios."""
    import main

    return {"test_cases": [{"name": t["name"], "case": t["case"]} for t in main.TESTS]}


def run_test_case(name: str) -> dict:
    """ADK tool: run a single picker scenario via main.run_one."""
    import main

    run_dir, result = main.run_one(name)
    return {
        "status": "completed",
        "run_directory": run_dir,
        "result": result,
    }


def run_challenge_suite() -> dict:
    """ADK tool: run every picker scenario via main.run_suite.

    Device interaction, dropdown reconstruction and read-back all stay in
    the deterministic picker package; the agent only chooses what to run.
    """
    import main

    run_dir, results = main.run_suite()
    return {
        "status": "completed",
        "run_directory": run_dir,
        "results": results,
    }


root_agent = Agent(
    name="picker_qa_root_agent",
    description=(
        "ADK orchestration agent for the dropdown picker QA scenarios. "
        "Runs deterministic select-and-verify scenarios on an Android device."
    ),
    instruction=(
        "You run the dropdown picker QA scenarios. Use list_test_cases to see "
        "what exists, run_test_case for a single scenario, or "
        "run_challenge_suite for all of them, and report the run directory "
        "and the PASS/FAIL outcome of each scenario."
    ),
    tools=[list_test_cases, run_test_case, run_challenge_suite],
)
