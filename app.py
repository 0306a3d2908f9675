import logging
import os

import gradio as gr

from json_normalizer.handlers_inspect import (
    COERCIONS,
    flatten_handler,
    load_document_from_text,
    prepare_document_payload,
    resolve_path_handler,
)
from json_normalizer.handlers_compare import (
    compare_documents_handler,
    handle_primary_upload,
    handle_secondary_upload,
    merge_documents_handler,
)

logging.basicConfig(level=os.environ.get("JSON_NORMALIZER_LOG_LEVEL", "INFO"))

# --- UI Definition ---
with gr.Blocks(title="JSON Normalizer") as demo:
    gr.Markdown("# JSON Normalizer")
    gr.Markdown("Load loosely typed JSON, resolve paths through flexible coercers, and compare documents.")

    # State
    document_state = gr.State()
    primary_data_state = gr.State()
    secondary_data_state = gr.State()

    with gr.Tab("Inspect"):
        with gr.Row():
            # Left Panel: Input
            with gr.Column(scale=1):
                gr.Markdown("### 1. Import")
                file_input = gr.File(label="Upload JSON File", file_types=[".json"])
                text_input = gr.Code(label="...or paste JSON", language="json")
                parse_text_btn = gr.Button("Parse Text")
                status_msg = gr.Textbox(label="Status", interactive=False)

            # Right Panel: Resolution
            with gr.Column(scale=1):
                gr.Markdown("### 2. Resolve a Path")
                path_selector = gr.Dropdown(
                    label="Dot Path",
                    choices=[],
                    allow_custom_value=True,
                    interactive=True,
                )
                coercion_selector = gr.Dropdown(
                    label="Coerce As",
                    choices=list(COERCIONS),
                    value="raw",
                    interactive=True,
                )
                resolve_btn = gr.Button("Resolve", variant="primary")
                resolved_output = gr.JSON(label="Resolved Value")
                diagnostics = gr.Textbox(label="Diagnostics", interactive=False, lines=3)

        gr.Markdown("### 3. Flattened View")
        encode_query = gr.Checkbox(label="URL-encode query string", value=True)
        flat_output = gr.JSON(label="Flattened Document")
        query_output = gr.Textbox(label="Query String", interactive=False)

        file_input.upload(
            fn=prepare_document_payload,
            inputs=[file_input],
            outputs=[document_state, path_selector, status_msg],
        )

        parse_text_btn.click(
            fn=load_document_from_text,
            inputs=[text_input],
            outputs=[document_state, path_selector, status_msg],
        )

        resolve_btn.click(
            fn=resolve_path_handler,
            inputs=[document_state, path_selector, coercion_selector],
            outputs=[resolved_output, diagnostics],
        )

        document_state.change(
            fn=flatten_handler,
            inputs=[document_state, encode_query],
            outputs=[flat_output, query_output],
        )

        encode_query.change(
            fn=flatten_handler,
            inputs=[document_state, encode_query],
            outputs=[flat_output, query_output],
        )

    with gr.Tab("Compare"):
        gr.Markdown("### 1. Upload both documents")
        with gr.Row():
            with gr.Column():
                primary_file = gr.File(label="Primary Document", file_types=[".json"])
                primary_status = gr.Textbox(label="Primary Status", interactive=False)
            with gr.Column():
                secondary_file = gr.File(label="Secondary Document", file_types=[".json"])
                secondary_status = gr.Textbox(label="Secondary Status", interactive=False)

        gr.Markdown("### 2. Diff")
        diff_btn = gr.Button("Compare")
        diff_summary = gr.Textbox(label="Summary", interactive=False)
        diff_output = gr.JSON(label="Changes")

        gr.Markdown("### 3. Deep merge & export")
        merge_filename = gr.Textbox(label="Merged Output Filename", placeholder="merged_output.json")
        merge_btn = gr.Button("Merge & Download", variant="primary")
        merge_download = gr.File(label="Merged Result")
        merge_status = gr.Textbox(label="Merge Status", interactive=False)
        merge_preview = gr.JSON(label="Merged Document")

        primary_file.upload(
            fn=handle_primary_upload,
            inputs=[primary_file],
            outputs=[primary_data_state, primary_status],
        )

        secondary_file.upload(
            fn=handle_secondary_upload,
            inputs=[secondary_file],
            outputs=[secondary_data_state, secondary_status],
        )

        diff_btn.click(
            fn=compare_documents_handler,
            inputs=[primary_data_state, secondary_data_state],
            outputs=[diff_output, diff_summary],
        )

        merge_btn.click(
            fn=merge_documents_handler,
            inputs=[primary_data_state, secondary_data_state, merge_filename],
            outputs=[merge_download, merge_status, merge_preview],
        )

if __name__ == "__main__":
    demo.launch(
        server_name=os.environ.get("JSON_NORMALIZER_HOST", "127.0.0.1"),
        server_port=int(os.environ.get("JSON_NORMALIZER_PORT", "7860")),
    )
