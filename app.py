import streamlit as st

from texttoslides import config
from texttoslides.errors import TextToSlidesError, UploadValidationError
from texttoslides.pipeline import analyze_template_request, generate_presentation
from texttoslides.schemas import ProviderConfig
from texttoslides.utils import read_uploaded_template, validate_generation_request

config.configure_logging()

st.set_page_config(page_title="TextToSlides", layout="wide")

PROVIDER_NAMES = {"openai": "OpenAI", "anthropic": "Anthropic", "gemini": "Google Gemini"}

# Initialize Session State
for key, default in {
    "template_bytes": None,
    "template_name": None,
    "template_analysis": None,
    "ppt_bytes": None,
}.items():
    if key not in st.session_state:
        st.session_state[key] = default

# --- Sidebar ---
st.sidebar.title("LLM Provider")
provider = st.sidebar.selectbox("Provider", list(PROVIDER_NAMES), format_func=PROVIDER_NAMES.get)
model = st.sidebar.selectbox("Model", config.PROVIDER_MODELS[provider])
api_key = st.sidebar.text_input("API Key", value=config.env_api_key(provider), type="password")

if st.sidebar.button("Clear Session"):
    for key in ["template_bytes", "template_name", "template_analysis", "ppt_bytes"]:
        st.session_state[key] = None
    st.sidebar.success("Session cleared.")
    st.rerun()

# --- Main Flow ---
st.title("TextToSlides")

# Step 1: Upload Template
st.header("Step 1: Upload Template")
uploaded_file = st.file_uploader("Upload a .pptx or .potx file", type=["pptx", "potx"], key="uploader")

if uploaded_file is not None and uploaded_file.name != st.session_state.template_name:
    try:
        st.session_state.template_bytes = read_uploaded_template(uploaded_file)
        st.session_state.template_name = uploaded_file.name
        with st.spinner("Analyzing template..."):
            st.session_state.template_analysis = analyze_template_request(st.session_state.template_bytes)
    except UploadValidationError as e:
        st.error(str(e))

analysis = st.session_state.template_analysis
if analysis:
    st.success(f"Loaded template: {st.session_state.template_name}")
    with st.expander("Template Analysis"):
        colors = analysis.theme.color_scheme
        fonts = analysis.theme.font_scheme
        st.markdown(f"**Fonts:** {fonts.major_font} (headings), {fonts.minor_font} (body)")
        st.markdown(
            f"**Colors:** primary `{colors.primary}`, secondary `{colors.secondary}`, "
            f"accent `{colors.accent}`, background `{colors.background}`"
        )
        st.markdown("**Layouts:**")
        for layout in analysis.layouts:
            st.markdown(f"- {layout.name} ({layout.type})")
        st.markdown(f"**Images:** {len(analysis.images)}")
        st.json(analysis.to_wire())

# Step 2: Text
st.header("Step 2: Enter Text")
text = st.text_area("Text or markdown to convert", height=250)
guidance = st.text_input("Guidance (optional)", placeholder="e.g. 'Investor pitch, keep it to 8 slides'")

# Step 3: Generate
st.header("Step 3: Generate")
if st.button("Generate Presentation", type="primary"):
    try:
        validate_generation_request(text, provider, api_key, st.session_state.template_bytes)
        provider_config = ProviderConfig(provider=provider, api_key=api_key.strip(), model=model)
        with st.spinner("Generating presentation... This may take up to a minute."):
            st.session_state.ppt_bytes = generate_presentation(
                text, guidance, provider_config, st.session_state.template_bytes
            )
        st.success("Generation complete!")
    except UploadValidationError as e:
        st.warning(str(e))
    except TextToSlidesError as e:
        st.error(f"Failed to generate presentation: {e}")

if st.session_state.ppt_bytes:
    st.download_button(
        label="Download PPTX",
        data=st.session_state.ppt_bytes,
        file_name=config.output_filename(),
        mime=config.PPTX_MIME_TYPE,
    )
