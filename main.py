import asyncio
import sys

from runrelay import GatewayConfig, build_gateway, configure_logging


# -----------------------
# Manual end-to-end check against a real assistant.
# Needs RUNRELAY_OPENAI_API_KEY and RUNRELAY_ASSISTANT_ID (a .env file works).
# -----------------------


async def main(message: str) -> None:
    config = GatewayConfig.from_env()
    configure_logging(config.log_level)

    gateway = await build_gateway(config)
    try:
        print("\n--- 1) Advertise local tools to the assistant ---")
        sent = await gateway.sync_assistant_tools()
        print("descriptors sent:", sent)
        for summary in gateway.registry.list_tool_summaries():
            print(" ", summary)

        print("\n--- 2) Start (or reuse) a session ---")
        started = await gateway.start_session(platform="cli", username="demo")
        print("session:", started)

        print("\n--- 3) Post a message and start a run ---")
        run_id = await gateway.post_message(started.session_id, message)
        print("run id:", run_id)

        print("\n--- 4) Check the run until it settles ---")
        outcome = await gateway.check_run(started.session_id, run_id)
        # a timeout only means the run is still going; checking again resumes polling
        while outcome.status == "timeout":
            print("still running, checking again...")
            outcome = await gateway.check_run(started.session_id, run_id)
        print("result:", outcome.to_dict())
    finally:
        await gateway.close()


if __name__ == "__main__":
    asyncio.run(main(" ".join(sys.argv[1:]) or "Hello! What time is it in Lima?"))
